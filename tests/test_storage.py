"""
Tests for the entity store contract, run against both backends
"""
import pytest
from unittest.mock import Mock
from werkzeug.security import check_password_hash

from database.connection import check_db_connection
from services.records import NewContact, NewTestimonial, NewGalleryItem
from services.storage import (
    MemoryStore,
    DuplicateRecordError,
    create_store,
    newest_first,
)

FAST_HASH = 'pbkdf2:sha256:1000'


@pytest.fixture(params=['memory', 'database'])
def entity_store(request):
    """Fresh store for each backend; the database one uses in-memory SQLite"""
    config = {'STORAGE_BACKEND': request.param, 'PASSWORD_HASH_METHOD': FAST_HASH}
    if request.param == 'database':
        config['DATABASE_URL'] = 'sqlite:///:memory:'
    return create_store(config)


def _contact(name='Jane'):
    return NewContact(name=name, email='jane@x.com', service='Cleaning Services', message='Hi')


def _testimonial(name='Bob', rating=5):
    return NewTestimonial(name=name, rating=rating, text='Great work')


def _gallery_item(title='Deck', category='construction'):
    return NewGalleryItem(title=title, category=category, image_url=f'/uploads/{title}.png')


@pytest.mark.unit
class TestCreateStore:
    """Tests for backend selection"""

    def test_memory_is_default(self):
        store = create_store({})
        assert isinstance(store, MemoryStore)
        assert store.backend == 'memory'

    def test_database_backend(self):
        store = create_store({'STORAGE_BACKEND': 'database', 'DATABASE_URL': 'sqlite:///:memory:'})
        assert store.backend == 'database'

    def test_database_without_url(self):
        """Test the database backend refuses to start without a URL"""
        with pytest.raises(RuntimeError, match='DATABASE_URL'):
            create_store({'STORAGE_BACKEND': 'database'})

    def test_unknown_backend(self):
        with pytest.raises(RuntimeError, match='Unknown STORAGE_BACKEND'):
            create_store({'STORAGE_BACKEND': 'redis'})


@pytest.mark.unit
class TestUsers:
    """Tests for user records"""

    def test_create_user_hashes_password(self, entity_store):
        """Test the stored hash verifies and is not the plaintext"""
        user = entity_store.create_user('admin', 's3cret', is_admin=True)

        assert user.id == 1
        assert user.is_admin is True
        assert user.password_hash != 's3cret'
        assert check_password_hash(user.password_hash, 's3cret')

    def test_duplicate_username(self, entity_store):
        entity_store.create_user('admin', 'one')
        with pytest.raises(DuplicateRecordError):
            entity_store.create_user('admin', 'two')
        assert entity_store.count_users() == 1

    def test_lookup(self, entity_store):
        user = entity_store.create_user('admin', 'pw')
        assert entity_store.get_user(user.id).username == 'admin'
        assert entity_store.get_user_by_username('admin').id == user.id
        assert entity_store.get_user(999) is None
        assert entity_store.get_user_by_username('nobody') is None

    def test_to_dict_hides_hash(self, entity_store):
        user = entity_store.create_user('admin', 'pw', is_admin=True)
        assert user.to_dict() == {'id': user.id, 'username': 'admin', 'isAdmin': True}


@pytest.mark.unit
class TestContacts:
    """Tests for contact records"""

    def test_new_contact_is_unread(self, entity_store):
        contact = entity_store.create_contact(_contact())
        assert contact.id == 1
        assert contact.is_read is False
        assert contact.created_at is not None

    def test_ids_increase(self, entity_store):
        ids = [entity_store.create_contact(_contact(f'c{i}')).id for i in range(3)]
        assert ids == [1, 2, 3]

    def test_newest_first(self, entity_store):
        for name in ('first', 'second', 'third'):
            entity_store.create_contact(_contact(name))
        assert [c.name for c in entity_store.get_contacts()] == ['third', 'second', 'first']

    def test_mark_as_read_is_idempotent(self, entity_store):
        """Test marking twice leaves the contact read"""
        contact = entity_store.create_contact(_contact())
        assert entity_store.mark_contact_as_read(contact.id).is_read is True
        assert entity_store.mark_contact_as_read(contact.id).is_read is True
        assert entity_store.get_contact(contact.id).is_read is True

    def test_mark_as_read_leaves_others_unread(self, entity_store):
        jane = entity_store.create_contact(_contact('Jane'))
        joe = entity_store.create_contact(_contact('Joe'))

        entity_store.mark_contact_as_read(jane.id)

        assert entity_store.get_contact(jane.id).is_read is True
        assert entity_store.get_contact(joe.id).is_read is False

    def test_mark_missing_contact(self, entity_store):
        assert entity_store.mark_contact_as_read(42) is None

    def test_returned_records_are_copies(self, entity_store):
        """Test mutating a returned record does not change stored state"""
        contact = entity_store.create_contact(_contact())
        contact.is_read = True
        contact.name = 'Mallory'

        stored = entity_store.get_contact(contact.id)
        assert stored.is_read is False
        assert stored.name == 'Jane'


@pytest.mark.unit
class TestTestimonials:
    """Tests for testimonial moderation"""

    def test_new_testimonial_is_pending(self, entity_store):
        testimonial = entity_store.create_testimonial(_testimonial())
        assert testimonial.is_approved is False
        assert entity_store.get_approved_testimonials() == []
        assert len(entity_store.get_all_testimonials()) == 1

    def test_approve(self, entity_store):
        pending = entity_store.create_testimonial(_testimonial('Pending'))
        approved = entity_store.create_testimonial(_testimonial('Approved'))

        entity_store.approve_testimonial(approved.id)

        public = entity_store.get_approved_testimonials()
        assert [t.id for t in public] == [approved.id]
        assert entity_store.get_testimonial(pending.id).is_approved is False

    def test_approve_is_idempotent(self, entity_store):
        testimonial = entity_store.create_testimonial(_testimonial())
        entity_store.approve_testimonial(testimonial.id)
        assert entity_store.approve_testimonial(testimonial.id).is_approved is True
        assert len(entity_store.get_approved_testimonials()) == 1

    def test_create_pre_approved(self, entity_store):
        testimonial = entity_store.create_testimonial(_testimonial(), approved=True)
        assert testimonial.is_approved is True

    def test_approve_missing(self, entity_store):
        assert entity_store.approve_testimonial(7) is None


@pytest.mark.unit
class TestGallery:
    """Tests for gallery records"""

    def test_filter_by_category(self, entity_store):
        entity_store.create_gallery_item(_gallery_item('Deck', 'construction'))
        entity_store.create_gallery_item(_gallery_item('Bath', 'renovation'))
        entity_store.create_gallery_item(_gallery_item('Porch', 'construction'))

        titles = [i.title for i in entity_store.get_gallery_items_by_category('construction')]
        assert titles == ['Porch', 'Deck']
        assert entity_store.get_gallery_items_by_category('cleaning') == []

    def test_delete(self, entity_store):
        """Test delete returns True once, then False"""
        item = entity_store.create_gallery_item(_gallery_item())
        assert entity_store.delete_gallery_item(item.id) is True
        assert entity_store.delete_gallery_item(item.id) is False
        assert entity_store.get_gallery_item(item.id) is None

    def test_ids_not_reused_after_delete(self, entity_store):
        """Test deleting the newest item never frees its id"""
        first = entity_store.create_gallery_item(_gallery_item('One'))
        second = entity_store.create_gallery_item(_gallery_item('Two'))
        entity_store.delete_gallery_item(second.id)

        third = entity_store.create_gallery_item(_gallery_item('Three'))

        assert third.id > second.id > first.id

    def test_image_url_kept(self, entity_store):
        item = entity_store.create_gallery_item(_gallery_item('Deck'))
        assert item.to_dict()['imageUrl'] == '/uploads/Deck.png'


@pytest.mark.unit
class TestStats:
    """Tests for record counts"""

    def test_counts(self, entity_store):
        entity_store.create_user('admin', 'pw')
        entity_store.create_contact(_contact())
        entity_store.create_testimonial(_testimonial())
        entity_store.create_testimonial(_testimonial())

        assert entity_store.stats() == {
            'users': 1,
            'contacts': 1,
            'testimonials': 2,
            'gallery_items': 0,
        }

    def test_ping(self, entity_store):
        assert entity_store.ping() is True


@pytest.mark.unit
class TestDatabaseConnectionCheck:
    """Tests for the connectivity check behind DatabaseStore.ping"""

    def test_unreachable_database(self):
        engine = Mock()
        engine.connect.side_effect = OSError('connection refused')

        with pytest.raises(RuntimeError, match='Cannot connect to database'):
            check_db_connection(engine)


@pytest.mark.unit
class TestNewestFirst:
    """Tests for the ordering helper"""

    def test_ties_broken_by_id(self):
        from datetime import datetime, timezone
        from types import SimpleNamespace

        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        records = [SimpleNamespace(id=i, created_at=moment) for i in (1, 3, 2)]

        assert [r.id for r in newest_first(records)] == [3, 2, 1]
