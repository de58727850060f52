"""
Startup seeding for the entity store.
Creates the admin account and, for an empty store, sample testimonials and
gallery items so the public pages have something to show.
"""

import logging

from services.records import NewTestimonial, NewGalleryItem
from services.storage import DuplicateRecordError

logger = logging.getLogger(__name__)

SAMPLE_TESTIMONIALS = [
    NewTestimonial(
        name="Sarah M.",
        location="Hartford, CT",
        rating=5,
        text="They remodeled our kitchen on time and on budget. The crew was "
             "respectful of our home and the finish work is beautiful.",
        service="Residential Remodeling",
    ),
    NewTestimonial(
        name="David R.",
        location="New Haven, CT",
        rating=5,
        text="Managing my rental units used to be a second job. Since handing "
             "it over, maintenance requests get handled the same week.",
        service="Property Management",
    ),
    NewTestimonial(
        name="Linda K.",
        location="Waterbury, CT",
        rating=4,
        text="The move-out cleaning got us our full deposit back. Very thorough.",
        service="Cleaning Services",
    ),
]

SAMPLE_GALLERY_ITEMS = [
    NewGalleryItem(
        title="Modern Kitchen Renovation",
        category="construction",
        image_url="/assets/construction/kitchen-renovation.jpg",
        description="Full gut renovation with custom cabinetry and quartz counters.",
    ),
    NewGalleryItem(
        title="Luxury Bathroom Remodel",
        category="renovation",
        image_url="/assets/renovation/bathroom-remodel.jpg",
        description="Walk-in tile shower, floating vanity and heated floors.",
    ),
    NewGalleryItem(
        title="Move-Out Deep Clean",
        category="cleaning",
        image_url="/assets/cleaning/move-out-clean.jpg",
    ),
]


def seed_admin(store, username, password):
    """Create the admin account if it does not exist yet."""
    existing = store.get_user_by_username(username)
    if existing:
        logger.info(f"Admin user already exists: {existing.username}")
        return existing

    try:
        admin = store.create_user(username, password, is_admin=True)
    except DuplicateRecordError:
        # Another worker created it between the lookup and the insert
        return store.get_user_by_username(username)
    logger.info(f"Created default admin user: {admin.username}")
    return admin


def seed_sample_content(store):
    """Add approved sample testimonials and gallery items to an empty store."""
    created = 0
    if not store.get_all_testimonials():
        for testimonial in SAMPLE_TESTIMONIALS:
            store.create_testimonial(testimonial, approved=True)
            created += 1

    if not store.get_gallery_items():
        for item in SAMPLE_GALLERY_ITEMS:
            store.create_gallery_item(item)
            created += 1

    if created:
        logger.info(f"Seeded {created} sample records")
    return created


def seed_database(store, config):
    """
    Seed the store with default data.
    Call this at application startup.
    """
    username = config.get('ADMIN_USERNAME')
    password = config.get('ADMIN_PASSWORD')

    if username and password:
        seed_admin(store, username, password)
    else:
        logger.warning("⚠️  ADMIN_PASSWORD not set - no admin account seeded, dashboard login disabled")

    if config.get('SEED_SAMPLE_CONTENT'):
        seed_sample_content(store)
