#!/usr/bin/env python3
"""
Import gallery images from an assets directory into the entity store.

Images are organized by category in sub-directories:

    assets/
      construction/kitchen_remodel.jpg
      cleaning/IMG_MoveOut.png

Each image becomes a gallery item with imageUrl /assets/<category>/<file>.
Images already in the gallery (same imageUrl and category) are skipped, so
the script can be run repeatedly. Run it against STORAGE_BACKEND=database;
with the memory backend the imported items disappear when the script exits.

Usage: python import_gallery_assets.py [ASSETS_DIR]
"""

import os
import re
import sys

from config import get_config
from services.records import NewGalleryItem
from services.storage import create_store

IMAGE_PATTERN = re.compile(r'\.(jpeg|jpg|png|gif|webp)$', re.IGNORECASE)
DEFAULT_ASSETS_DIR = os.path.join('client', 'public', 'assets')


def clean_title(filename, category):
    """
    Turn a file name into a gallery title: drop the extension and any IMG
    prefix, split underscores and camel case into words, title-case them.
    """
    stem = os.path.splitext(filename)[0]
    stem = re.sub(r'^IMG[-_]?', '', stem, flags=re.IGNORECASE)
    stem = stem.replace('_', ' ')
    stem = ' '.join(part for part in re.split(r'(?=[A-Z])', stem) if part)

    words = stem.lower().split()
    title = ' '.join(word[:1].upper() + word[1:] for word in words)

    if len(title) < 3:
        return f"{category} Project"
    return f"{category} - {title}"


def find_categories(assets_dir):
    return sorted(
        entry.name for entry in os.scandir(assets_dir)
        if entry.is_dir()
    )


def find_images(category_dir):
    return sorted(
        name for name in os.listdir(category_dir)
        if IMAGE_PATTERN.search(name)
    )


def import_gallery_assets(store, assets_dir, url_prefix='/assets'):
    """
    Create gallery items for every image under assets_dir

    Args:
        store: EntityStore to write to
        assets_dir: Directory with one sub-directory per category
        url_prefix: URL path the assets directory is served under

    Returns:
        Number of items imported
    """
    categories = find_categories(assets_dir)
    print(f"📁 Found categories: {', '.join(categories)}")

    existing = {(item.image_url, item.category) for item in store.get_gallery_items()}
    imported = 0

    for category in categories:
        files = find_images(os.path.join(assets_dir, category))
        print(f"\nProcessing {category}: {len(files)} images")

        for filename in files:
            image_url = f"{url_prefix}/{category}/{filename}"
            if (image_url, category) in existing:
                print(f"  ✓ Skipping {filename} (already exists)")
                continue

            try:
                store.create_gallery_item(NewGalleryItem(
                    title=clean_title(filename, category),
                    category=category,
                    image_url=image_url,
                    description=None,
                ))
            except Exception as e:
                print(f"  ✗ Error importing {filename}: {e}")
                continue
            existing.add((image_url, category))
            print(f"  ✓ Imported: {filename}")
            imported += 1

    return imported


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    assets_dir = argv[0] if argv else DEFAULT_ASSETS_DIR

    if not os.path.isdir(assets_dir):
        print(f"❌ Assets directory not found: {assets_dir}")
        return 1

    config_class = get_config()
    config = {key: getattr(config_class, key) for key in dir(config_class) if key.isupper()}

    if config.get('STORAGE_BACKEND') != 'database':
        print("⚠️  STORAGE_BACKEND is not 'database' - imported items will not be persisted")

    store = create_store(config)
    imported = import_gallery_assets(store, assets_dir)

    print(f"\n✅ Import complete! Imported {imported} images.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
