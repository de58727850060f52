"""
Pytest configuration and shared fixtures
"""
import io
import os
import sys
import pytest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import Mock

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

ADMIN_PASSWORD = 'admin-test-password'


@pytest.fixture
def app_config():
    """Fixture providing test configuration"""
    from config import TestingConfig
    return TestingConfig


@pytest.fixture
def test_env_vars():
    """Fixture providing test environment variables"""
    original_env = os.environ.copy()

    # Set test environment variables
    os.environ['FLASK_ENV'] = 'testing'
    os.environ['SESSION_SECRET'] = 'test-secret-key-minimum-32-chars-long-for-security'
    os.environ['OPENAI_API_KEY'] = 'test-openai-key'
    os.environ['RESEND_API_KEY'] = 'test-resend-key'

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def upload_dir(tmp_path):
    """Empty upload folder for one test"""
    path = tmp_path / 'uploads'
    path.mkdir()
    return path


@pytest.fixture
def app(app_config, upload_dir):
    """Flask app on the memory store with a temporary upload folder"""
    from app_init import create_app
    return create_app(app_config, overrides={'UPLOAD_FOLDER': str(upload_dir)})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    """Test client holding an authenticated admin session"""
    client = app.test_client()
    response = client.post('/api/auth/login', json={
        'username': 'admin',
        'password': ADMIN_PASSWORD
    })
    assert response.status_code == 200
    return client


@pytest.fixture
def store(app):
    return app.entity_store


@pytest.fixture
def make_image():
    """Factory returning encoded image bytes (PNG by default)"""
    from PIL import Image

    def _make(fmt='PNG', size=(8, 8), color=(200, 120, 40)):
        buffer = io.BytesIO()
        Image.new('RGB', size, color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def sample_contact():
    return {
        'name': 'Jane',
        'email': 'jane@x.com',
        'service': 'Cleaning Services',
        'message': 'Hi'
    }


@pytest.fixture
def sample_maintenance_request():
    return {
        'name': 'Maria Lopez',
        'email': 'maria@example.com',
        'phone': '(860) 555-0142',
        'propertyAddress': '12 Elm St, Apt 3, Hartford, CT',
        'issueType': 'Plumbing',
        'description': 'Kitchen sink is leaking under the cabinet.',
        'urgency': 'high',
        'preferredContactTime': 'Morning (8am - 12pm)'
    }


def make_completion(content):
    """Shape of an OpenAI chat completion as far as AIService reads it"""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def mock_openai_client():
    """Mock OpenAI client answering every completion with a fixed text"""
    client = Mock()
    client.chat.completions.create.return_value = make_completion('This is a test response from the AI')
    return client


@pytest.fixture
def mock_resend_session():
    """Mock requests.Session accepting every email"""
    session = Mock()
    response = Mock(status_code=200, ok=True, text='{"id": "email-123"}')
    response.json.return_value = {'id': 'email-123'}
    session.post.return_value = response
    return session


@pytest.fixture
def completion():
    """Factory for fake chat completion responses"""
    return make_completion
