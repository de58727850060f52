"""
Tests for upload storage helpers
"""
import os
import re
import pytest

from app.utils.uploads import (
    generate_upload_filename,
    remove_upload,
    resolve_upload_path,
    upload_url,
)

STORED_NAME = re.compile(r'^\d{13}-\d{9}\.png$')


@pytest.mark.unit
class TestUploadNames:
    """Tests for generated file names and URLs"""

    def test_generated_name_format(self):
        """Test <epoch-millis>-<9 digits><ext> with a lower-cased extension"""
        assert STORED_NAME.match(generate_upload_filename('My Photo.PNG'))

    def test_names_are_unique(self):
        names = {generate_upload_filename('a.png') for _ in range(50)}
        assert len(names) == 50

    def test_upload_url(self):
        assert upload_url('1-2.png') == '/uploads/1-2.png'
        assert upload_url('1-2.png', '/media/') == '/media/1-2.png'


@pytest.mark.unit
class TestResolveUploadPath:
    """Tests for mapping image URLs back to files"""

    def test_upload_url_resolves(self, tmp_path):
        path = resolve_upload_path('/uploads/1-2.png', str(tmp_path))
        assert path == os.path.join(os.path.realpath(tmp_path), '1-2.png')

    @pytest.mark.parametrize('image_url', [
        '/assets/cleaning/a.jpg',
        'https://cdn.example.com/a.jpg',
        '/uploads/../secrets.txt',
        '/uploads/nested/a.png',
        '',
    ])
    def test_foreign_urls_ignored(self, tmp_path, image_url):
        assert resolve_upload_path(image_url, str(tmp_path)) is None


@pytest.mark.unit
class TestRemoveUpload:
    """Tests for deleting stored files"""

    def test_remove_existing(self, tmp_path):
        path = tmp_path / 'a.png'
        path.write_bytes(b'x')
        assert remove_upload(str(path)) is True
        assert not path.exists()

    def test_remove_missing_is_ok(self, tmp_path):
        assert remove_upload(str(tmp_path / 'gone.png')) is True
