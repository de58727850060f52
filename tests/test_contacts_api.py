"""
Integration tests for the contact form and admin inbox
"""
import pytest
from unittest.mock import patch


@pytest.mark.integration
class TestSubmitContact:
    """Tests for POST /api/contacts"""

    def test_submit_contact(self, client, sample_contact):
        """Test a valid submission is stored unread"""
        response = client.post('/api/contacts', json=sample_contact)
        data = response.get_json()

        assert response.status_code == 201
        assert data['id'] == 1
        assert data['name'] == 'Jane'
        assert data['phone'] is None
        assert data['isRead'] is False
        assert data['createdAt']

    def test_submit_as_form(self, client, sample_contact):
        """Test the form can also be posted url-encoded"""
        response = client.post('/api/contacts', data=sample_contact)
        assert response.status_code == 201

    @pytest.mark.parametrize('phone', ['555-0142', '860-555-0142 ext 12', 'call after 5pm'])
    def test_free_text_phone_accepted(self, client, sample_contact, phone):
        """Test the phone field is stored as typed, whatever its format"""
        response = client.post('/api/contacts', json=dict(sample_contact, phone=phone))

        assert response.status_code == 201
        assert response.get_json()['phone'] == phone

    def test_overlong_phone_rejected(self, client, store, sample_contact):
        response = client.post('/api/contacts', json=dict(sample_contact, phone='5' * 51))

        assert response.status_code == 400
        assert [d['field'] for d in response.get_json()['details']] == ['phone']
        assert store.get_contacts() == []

    def test_client_cannot_set_read_flag(self, client, sample_contact):
        response = client.post('/api/contacts', json=dict(sample_contact, isRead=True, id=50))
        data = response.get_json()
        assert data['isRead'] is False
        assert data['id'] == 1

    def test_missing_email(self, client, store, sample_contact):
        """Test an invalid form returns details and stores nothing"""
        del sample_contact['email']

        response = client.post('/api/contacts', json=sample_contact)
        data = response.get_json()

        assert response.status_code == 400
        assert data['error'] == 'Invalid form data'
        assert data['details'] == [{'field': 'email', 'message': 'Required'}]
        assert store.get_contacts() == []

    def test_invalid_json_body(self, client):
        response = client.post('/api/contacts', data='not json', content_type='application/json')
        assert response.status_code == 400

    def test_store_failure(self, app, client, sample_contact):
        with patch.object(app.entity_store, 'create_contact', side_effect=RuntimeError("disk full")):
            response = client.post('/api/contacts', json=sample_contact)
        assert response.status_code == 500
        assert response.get_json() == {'error': 'Failed to submit contact form'}


@pytest.mark.integration
class TestAdminInbox:
    """Tests for listing contacts and marking them read"""

    def test_list_requires_admin(self, client, sample_contact):
        client.post('/api/contacts', json=sample_contact)
        assert client.get('/api/contacts').status_code == 401

    def test_list_newest_first(self, admin_client, sample_contact):
        for name in ('Jane', 'Joe'):
            admin_client.post('/api/contacts', json=dict(sample_contact, name=name))

        response = admin_client.get('/api/contacts')

        assert response.status_code == 200
        assert [c['name'] for c in response.get_json()] == ['Joe', 'Jane']

    def test_mark_read(self, admin_client, sample_contact):
        """Test marking read twice succeeds both times and leaves other contacts unread"""
        contact_id = admin_client.post('/api/contacts', json=sample_contact).get_json()['id']
        other_id = admin_client.post('/api/contacts', json=dict(sample_contact, name='Joe')).get_json()['id']

        first = admin_client.patch(f'/api/contacts/{contact_id}/read')
        second = admin_client.patch(f'/api/contacts/{contact_id}/read')

        assert first.status_code == 200
        assert first.get_json()['isRead'] is True
        assert second.status_code == 200
        assert second.get_json()['isRead'] is True

        flags = {c['id']: c['isRead'] for c in admin_client.get('/api/contacts').get_json()}
        assert flags == {contact_id: True, other_id: False}

    def test_mark_read_missing(self, admin_client):
        response = admin_client.patch('/api/contacts/999/read')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Contact not found'}

    def test_mark_read_invalid_id(self, admin_client):
        response = admin_client.patch('/api/contacts/abc/read')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Invalid contact ID'}

    def test_mark_read_requires_admin(self, client):
        assert client.patch('/api/contacts/1/read').status_code == 401
