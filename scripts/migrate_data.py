#!/usr/bin/env python3
"""
Migration script to copy JSON fixture data (categories and prompts with their
legacy reviews) into the database.

Usage:
    python scripts/migrate_data.py [data_dir]

data_dir defaults to ./data and should hold categories.json and prompts.json.
"""
import json
import os
import sys
from datetime import datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from prompt_library.config import Settings
from prompt_library.database import Database
from prompt_library.models import Category, Prompt, Review, User, DEFAULT_CATEGORY, DEFAULT_ESTIMATED_TIME
from prompt_library.services.prompt_catalog import resolve_tags
from prompt_library.services.rating import is_valid_rating, recompute_rating

ANONYMOUS_EMAIL = "anonymous@system.local"


def _load(path: str) -> list:
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _timestamp(value) -> datetime:
    if not value:
        return datetime.utcnow()
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return datetime.utcnow()


def get_anonymous_user(db) -> User:
    """Owner for legacy reviews that carry no user."""
    user = db.query(User).filter(User.email == ANONYMOUS_EMAIL).first()
    if not user:
        user = User(email=ANONYMOUS_EMAIL, name="Anonymous User", provider="system", verified=True)
        db.add(user)
        db.flush()
    return user


def migrate_categories(db, categories: list) -> int:
    for data in categories:
        category = db.query(Category).filter(Category.name == data["name"]).first()
        if not category:
            category = Category(name=data["name"], created_at=_timestamp(data.get("createdAt")))
            if data.get("id"):
                category.id = data["id"]
            db.add(category)
        category.description = data.get("description") or None
        category.color = data.get("color") or None
        category.icon = data.get("icon") or None
        category.updated_at = _timestamp(data.get("updatedAt"))
    db.commit()
    return len(categories)


def migrate_prompts(db, prompts: list) -> tuple:
    prompt_count = 0
    review_count = 0
    anonymous = None

    for data in prompts:
        prompt = db.query(Prompt).filter(Prompt.id == data.get("id")).first() if data.get("id") else None
        if not prompt:
            prompt = Prompt(created_at=_timestamp(data.get("createdAt")))
            if data.get("id"):
                prompt.id = data["id"]
            db.add(prompt)

        category_name = data.get("category") or DEFAULT_CATEGORY
        category = db.query(Category).filter(Category.name == category_name).first()

        # author_id stays empty: migrated prompts are anonymous
        prompt.title = data["title"]
        prompt.description = data.get("description") or ""
        prompt.prompt = data["prompt"]
        prompt.category = category_name
        prompt.category_id = category.id if category else None
        prompt.difficulty = data.get("difficulty") or "medium"
        prompt.estimated_time = data.get("estimatedTime") or DEFAULT_ESTIMATED_TIME
        prompt.placeholders = data.get("placeholders") or []
        prompt.usage_count = data.get("usageCount") or 0
        prompt.rating = data.get("rating") or 0
        prompt.updated_at = _timestamp(data.get("updatedAt"))
        prompt.tag_objects = resolve_tags(db, data.get("tags") or [])
        db.flush()

        reviews = data.get("reviews") or []
        if reviews:
            print(f"  Migrating {len(reviews)} reviews for \"{prompt.title}\"")
            anonymous = anonymous or get_anonymous_user(db)

        for review_data in reviews:
            if not is_valid_rating(review_data.get("rating")):
                print(f"  Skipping review with invalid rating: {review_data.get('rating')!r}")
                continue
            review = db.query(Review).filter(Review.id == review_data.get("id")).first() if review_data.get("id") else None
            if not review:
                review = Review(prompt_id=prompt.id, created_at=_timestamp(review_data.get("createdAt")))
                if review_data.get("id"):
                    review.id = review_data["id"]
                db.add(review)
            review.user_id = anonymous.id
            review.rating = review_data["rating"]
            review.comment = review_data.get("comment") or None
            review.tool_used = review_data.get("toolUsed") or None
            review.what_worked = review_data.get("whatWorked") or None
            review.what_didnt_work = review_data.get("whatDidntWork") or None
            review.improvement_suggestions = review_data.get("improvementSuggestions") or None
            review.test_run_graphics_link = review_data.get("testRunGraphicsLink") or None
            review.prompt_edits = review_data.get("promptEdits") or None
            review.media_files = review_data.get("mediaFiles") or []
            review.screenshots = review_data.get("screenshots") or []
            review_count += 1

        db.commit()
        if reviews:
            recompute_rating(db, prompt.id)
        prompt_count += 1

    return prompt_count, review_count


def run_migration(data_dir: str, database: Database):
    print("Starting data migration...")
    print(f"Database: {database.url.split('@')[-1]}")

    categories = _load(os.path.join(data_dir, "categories.json"))
    prompts = _load(os.path.join(data_dir, "prompts.json"))
    print(f"Found {len(categories)} categories")
    print(f"Found {len(prompts)} prompts")

    database.init_db()
    db = database.session()
    try:
        print("Migrating categories...")
        migrate_categories(db, categories)
        print("Categories migrated")

        print("Migrating prompts...")
        prompt_count, review_count = migrate_prompts(db, prompts)
        print("Prompts migrated")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    print("\nMigration summary:")
    print(f"  Categories: {len(categories)}")
    print(f"  Prompts: {prompt_count}")
    print(f"  Reviews: {review_count}")
    return {"categories": len(categories), "prompts": prompt_count, "reviews": review_count}


if __name__ == "__main__":
    data_dir = sys.argv[1] if len(sys.argv) > 1 else os.path.join(os.getcwd(), "data")
    run_migration(data_dir, Database(Settings().database_url))
