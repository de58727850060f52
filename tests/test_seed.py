"""
Tests for startup seeding
"""
import pytest
from werkzeug.security import check_password_hash

from database.seed import (
    SAMPLE_GALLERY_ITEMS,
    SAMPLE_TESTIMONIALS,
    seed_admin,
    seed_database,
    seed_sample_content,
)
from services.storage import MemoryStore


@pytest.fixture
def empty_store():
    return MemoryStore(password_method='pbkdf2:sha256:1000')


@pytest.mark.unit
class TestSeedAdmin:
    """Tests for the admin account"""

    def test_creates_admin(self, empty_store):
        admin = seed_admin(empty_store, 'admin', 'pw')
        assert admin.is_admin is True
        assert check_password_hash(admin.password_hash, 'pw')

    def test_existing_admin_untouched(self, empty_store):
        """Test reseeding keeps the original password"""
        first = seed_admin(empty_store, 'admin', 'original')
        second = seed_admin(empty_store, 'admin', 'changed')

        assert second.id == first.id
        assert empty_store.count_users() == 1
        assert check_password_hash(second.password_hash, 'original')


@pytest.mark.unit
class TestSeedSampleContent:
    """Tests for demo content"""

    def test_seeds_empty_store(self, empty_store):
        created = seed_sample_content(empty_store)

        assert created == len(SAMPLE_TESTIMONIALS) + len(SAMPLE_GALLERY_ITEMS)
        assert len(empty_store.get_approved_testimonials()) == len(SAMPLE_TESTIMONIALS)

    def test_skips_populated_store(self, empty_store):
        seed_sample_content(empty_store)
        assert seed_sample_content(empty_store) == 0


@pytest.mark.unit
class TestSeedDatabase:
    """Tests for the startup entry point"""

    def test_without_password_no_admin(self, empty_store):
        seed_database(empty_store, {'ADMIN_USERNAME': 'admin', 'ADMIN_PASSWORD': None})
        assert empty_store.count_users() == 0

    def test_full_seed(self, empty_store):
        seed_database(empty_store, {
            'ADMIN_USERNAME': 'admin',
            'ADMIN_PASSWORD': 'pw',
            'SEED_SAMPLE_CONTENT': True,
        })
        assert empty_store.get_user_by_username('admin') is not None
        assert len(empty_store.get_gallery_items()) == len(SAMPLE_GALLERY_ITEMS)

    def test_app_seeds_admin_only(self, store):
        """Test the test app has its admin but no demo content"""
        assert store.get_user_by_username('admin').is_admin is True
        assert store.get_all_testimonials() == []
