"""
Integration tests for the chatbot, quote estimate and admin AI helpers
"""
import pytest
from unittest.mock import patch

from app.api.ai_chat import (
    CHAT_CONFIG_ERROR,
    CHAT_FAILED,
    QUOTE_CONFIG_ERROR,
    QUOTE_FAILED,
)
from errors import UpstreamUnavailable

QUOTE = {
    'serviceType': 'Kitchen Remodel',
    'projectDescription': 'Replace cabinets and countertops',
    'squareFootage': '180',
    'location': 'Hartford, CT',
}


@pytest.fixture
def ai_app(app, mock_openai_client):
    """App whose AI service talks to a mock OpenAI client"""
    app.ai_service.client = mock_openai_client
    return app


@pytest.mark.integration
class TestChatEndpoint:
    """Tests for POST /api/chat"""

    def test_chat_reply(self, ai_app, client):
        response = client.post('/api/chat', json={'messages': [{'role': 'user', 'content': 'Do you build decks?'}]})
        assert response.status_code == 200
        assert response.get_json() == {'response': 'This is a test response from the AI'}

    def test_chat_requires_messages(self, ai_app, client, mock_openai_client):
        response = client.post('/api/chat', json={'messages': []})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Messages array is required'
        mock_openai_client.chat.completions.create.assert_not_called()

    def test_chat_not_configured(self, client):
        """Test a missing API key yields a safe 500 message"""
        response = client.post('/api/chat', json={'messages': [{'role': 'user', 'content': 'hi'}]})
        assert response.status_code == 500
        assert response.get_json() == {'error': CHAT_CONFIG_ERROR}

    def test_chat_provider_failure_hides_details(self, ai_app, client):
        with patch.object(ai_app.ai_service, 'get_chat_completion',
                          side_effect=UpstreamUnavailable('502 from upstream: secret detail', service='openai')):
            response = client.post('/api/chat', json={'messages': [{'role': 'user', 'content': 'hi'}]})

        assert response.status_code == 500
        assert response.get_json() == {'error': CHAT_FAILED}
        assert b'secret detail' not in response.data


@pytest.mark.integration
class TestQuoteEstimateEndpoint:
    """Tests for POST /api/quote-estimate"""

    def test_estimate(self, ai_app, client, mock_openai_client):
        response = client.post('/api/quote-estimate', json=QUOTE)

        assert response.status_code == 200
        assert response.get_json() == {'estimate': 'This is a test response from the AI'}
        prompt = mock_openai_client.chat.completions.create.call_args.kwargs['messages'][1]['content']
        assert '- Approximate Size: 180 sq ft' in prompt

    def test_estimate_missing_description(self, ai_app, client):
        response = client.post('/api/quote-estimate', json={'serviceType': 'Kitchen Remodel'})
        assert response.status_code == 400
        assert response.get_json()['details'][0]['field'] == 'projectDescription'

    def test_estimate_not_configured(self, client):
        response = client.post('/api/quote-estimate', json=QUOTE)
        assert response.status_code == 500
        assert response.get_json() == {'error': QUOTE_CONFIG_ERROR}

    def test_estimate_empty_reply(self, ai_app, client, mock_openai_client, completion):
        mock_openai_client.chat.completions.create.return_value = completion('')
        response = client.post('/api/quote-estimate', json=QUOTE)
        assert response.status_code == 500
        assert response.get_json() == {'error': QUOTE_FAILED}


@pytest.mark.integration
class TestAdminAIEndpoints:
    """Tests for the admin content and caption helpers"""

    def test_generate_content_requires_admin(self, ai_app, client):
        response = client.post('/api/admin/generate-content', json={'contentType': 'marketing-copy', 'context': 'decks'})
        assert response.status_code == 401

    def test_generate_content(self, ai_app, admin_client):
        response = admin_client.post('/api/admin/generate-content', json={
            'contentType': 'marketing-copy', 'context': 'Spring deck specials'
        })
        assert response.status_code == 200
        assert response.get_json() == {'content': 'This is a test response from the AI'}

    def test_generate_content_invalid(self, ai_app, admin_client):
        response = admin_client.post('/api/admin/generate-content', json={'contentType': 'marketing-copy'})
        assert response.status_code == 400

    def test_generate_content_not_configured(self, admin_client):
        response = admin_client.post('/api/admin/generate-content', json={
            'contentType': 'marketing-copy', 'context': 'decks'
        })
        assert response.status_code == 500
        assert response.get_json() == {'error': 'Failed to generate content'}

    def test_enhance_description(self, ai_app, admin_client, mock_openai_client):
        response = admin_client.post('/api/admin/enhance-description', json={
            'title': 'Backyard Deck', 'category': 'construction', 'description': 'A deck'
        })

        assert response.status_code == 200
        assert response.get_json() == {'description': 'This is a test response from the AI'}
        prompt = mock_openai_client.chat.completions.create.call_args.kwargs['messages'][1]['content']
        assert 'Current Description: A deck' in prompt

    def test_enhance_description_requires_admin(self, ai_app, client):
        response = client.post('/api/admin/enhance-description', json={'title': 'Deck', 'category': 'construction'})
        assert response.status_code == 401

    def test_enhance_description_not_configured(self, admin_client):
        response = admin_client.post('/api/admin/enhance-description', json={
            'title': 'Deck', 'category': 'construction'
        })
        assert response.status_code == 500
        assert response.get_json() == {'error': 'Failed to enhance description'}
