from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import event

from prompt_library.database import Database
from prompt_library.errors import ForbiddenError, NotFoundError, ValidationError
from prompt_library.models import ActivityAction, Category, Comment, Prompt, Review, Tag, User, UserActivity
from prompt_library.services.activity_service import ActivityService
from prompt_library.services.prompt_catalog import (
    PromptCatalog,
    coerce_int,
    resolve_tags,
    split_tags,
)


@pytest.fixture
def catalog(db_session, activity):
    return PromptCatalog(db_session, activity)


@pytest.fixture
def make_prompt(catalog, author):
    def _make(**fields):
        data = {"title": "A prompt", "prompt": "Some text"}
        data.update(fields)
        return catalog.create_prompt(data, author_id=author.id)

    return _make


def test_coerce_int():
    assert coerce_int("10", 50) == 10
    assert coerce_int("abc", 50) == 50
    assert coerce_int(None, 50) == 50
    assert coerce_int("-5", 0) == 0
    assert coerce_int("500", 50, maximum=200) == 200


def test_split_tags():
    assert split_tags("a, b,,c ") == ["a", "b", "c"]
    assert split_tags("") == []
    assert split_tags(None) == []


def test_resolve_tags_reuses_and_dedupes(db_session):
    db_session.add(Tag(name="existing"))
    db_session.commit()

    tags = resolve_tags(db_session, ["existing", "new", "new", " ", "existing"])
    assert [tag.name for tag in tags] == ["existing", "new"]
    db_session.commit()
    assert db_session.query(Tag).count() == 2


def test_create_prompt_defaults(make_prompt, author):
    """Test omitted fields get their defaults."""
    prompt = make_prompt(tags=["writing", "email"])

    assert prompt.category == "Uncategorized"
    assert prompt.category_id is None
    assert prompt.difficulty == "medium"
    assert prompt.estimated_time == "5-10 minutes"
    assert prompt.usage_count == 0
    assert prompt.rating == 0.0
    assert prompt.author_id == author.id
    assert prompt.tags == ["email", "writing"]


def test_create_prompt_links_existing_category(db_session, make_prompt):
    category = Category(name="Marketing")
    db_session.add(category)
    db_session.commit()

    prompt = make_prompt(category="Marketing")
    assert prompt.category_id == category.id


@pytest.mark.parametrize("fields", [
    {"title": "", "prompt": "Body"},
    {"title": "Title", "prompt": "   "},
    {"prompt": "Body"},
    {"title": "Title"},
])
def test_create_prompt_requires_title_and_prompt(catalog, author, fields):
    with pytest.raises(ValidationError):
        catalog.create_prompt(fields, author_id=author.id)


def test_create_prompt_rejects_unknown_difficulty(make_prompt):
    with pytest.raises(ValidationError):
        make_prompt(difficulty="impossible")


def test_create_prompt_logs_activity(make_prompt, db_session):
    prompt = make_prompt()
    activity = db_session.query(UserActivity).one()
    assert activity.action is ActivityAction.PROMPT_CREATED
    assert activity.details == {"promptId": prompt.id}


def test_create_prompt_survives_activity_failure(tmp_path, db_session, author):
    """Test a prompt is still created when activity logging fails."""
    broken = ActivityService(Database(f"sqlite:///{tmp_path / 'no_tables.db'}"))
    catalog = PromptCatalog(db_session, broken)

    prompt = catalog.create_prompt({"title": "Still here", "prompt": "Body"}, author_id=author.id)
    assert db_session.query(Prompt).filter(Prompt.id == prompt.id).count() == 1


def test_list_prompts_newest_first(catalog, make_prompt):
    first = make_prompt(title="First")
    second = make_prompt(title="Second")

    assert [p.id for p in catalog.list_prompts()] == [second.id, first.id]


def test_list_prompts_tag_filter_matches_any(catalog, make_prompt):
    """Test the tag filter keeps prompts carrying at least one requested tag."""
    a = make_prompt(title="A", tags=["x", "y"])
    make_prompt(title="B", tags=["y"])
    c = make_prompt(title="C", tags=["z"])

    result = catalog.list_prompts(tags=["x", "z"])
    assert {p.id for p in result} == {a.id, c.id}


def test_list_prompts_search_is_case_insensitive(catalog, make_prompt):
    match = make_prompt(title="Plain", description="Quarterly BUDGET review")
    make_prompt(title="Other")

    assert [p.id for p in catalog.list_prompts(search="budget")] == [match.id]


def test_list_prompts_search_treats_wildcards_literally(catalog, make_prompt):
    make_prompt(title="Nothing special")
    assert catalog.list_prompts(search="%") == []


def test_list_prompts_category_filter(catalog, make_prompt):
    match = make_prompt(category="Marketing")
    make_prompt(category="Sales")

    assert [p.id for p in catalog.list_prompts(category="Marketing")] == [match.id]


def test_list_prompts_pagination(catalog, make_prompt):
    for i in range(5):
        make_prompt(title=f"Prompt {i}")

    assert len(catalog.list_prompts(limit=2)) == 2
    assert len(catalog.list_prompts(limit=2, offset=4)) == 1
    assert len(catalog.list_prompts(limit="not-a-number")) == 5


def test_list_prompts_huge_offset_returns_nothing(catalog, make_prompt):
    make_prompt()
    assert catalog.list_prompts(offset="99999999999999999999") == []


def test_search_prompts_orders_by_rating_then_usage(catalog, make_prompt, db_session):
    low = make_prompt(title="Low")
    high = make_prompt(title="High")
    busy = make_prompt(title="Busy")
    db_session.query(Prompt).filter(Prompt.id == low.id).update({Prompt.rating: 2.0})
    db_session.query(Prompt).filter(Prompt.id == high.id).update({Prompt.rating: 4.0})
    db_session.query(Prompt).filter(Prompt.id == busy.id).update({Prompt.rating: 4.0, Prompt.usage_count: 9})
    db_session.commit()

    assert [p.id for p in catalog.search_prompts()] == [busy.id, high.id, low.id]
    assert [p.id for p in catalog.search_prompts(min_rating="3")] == [busy.id, high.id]
    assert len(catalog.search_prompts(min_rating="lots")) == 3


def test_search_prompts_matches_category_name(catalog, make_prompt):
    match = make_prompt(title="Ad copy", category="Marketing")
    make_prompt(title="Other", category="Engineering")

    assert [p.id for p in catalog.search_prompts(q="market")] == [match.id]
    assert catalog.search_prompts(q="no such thing") == []


def test_get_prompt_logs_view(catalog, make_prompt, db_session, author):
    prompt = make_prompt()
    fetched = catalog.get_prompt(prompt.id, viewer_id=author.id)

    assert fetched.id == prompt.id
    views = db_session.query(UserActivity).filter(UserActivity.action == ActivityAction.PROMPT_VIEWED).all()
    assert len(views) == 1


def test_get_missing_prompt(catalog):
    with pytest.raises(NotFoundError):
        catalog.get_prompt("missing")


def test_update_prompt(catalog, make_prompt, author):
    prompt = make_prompt(tags=["old"])
    updated = catalog.update_prompt(
        prompt.id,
        {"title": "Renamed", "tags": ["new"], "difficulty": "hard", "description": None},
        requester_id=author.id,
    )

    assert updated.title == "Renamed"
    assert updated.tags == ["new"]
    assert updated.difficulty == "hard"
    assert updated.prompt == "Some text"


def test_update_prompt_ignores_protected_fields(catalog, make_prompt, author, other_user):
    prompt = make_prompt()
    updated = catalog.update_prompt(
        prompt.id,
        {"rating": 5.0, "usage_count": 100, "author_id": other_user.id},
        requester_id=author.id,
    )

    assert updated.rating == 0.0
    assert updated.usage_count == 0
    assert updated.author_id == author.id


def test_update_prompt_can_clear_summary(catalog, make_prompt, author):
    prompt = make_prompt(summary="Explicit")
    updated = catalog.update_prompt(prompt.id, {"summary": None}, requester_id=author.id)
    assert updated.summary is None


def test_update_prompt_by_other_user(catalog, make_prompt, other_user):
    prompt = make_prompt()
    with pytest.raises(ForbiddenError):
        catalog.update_prompt(prompt.id, {"title": "Hijacked"}, requester_id=other_user.id)


def test_update_ownerless_prompt_is_forbidden(catalog, db_session, author):
    prompt = Prompt(title="Imported", prompt="Body")
    db_session.add(prompt)
    db_session.commit()

    with pytest.raises(ForbiddenError):
        catalog.update_prompt(prompt.id, {"title": "Mine now"}, requester_id=author.id)


def test_update_prompt_rejects_empty_title(catalog, make_prompt, author):
    prompt = make_prompt()
    with pytest.raises(ValidationError):
        catalog.update_prompt(prompt.id, {"title": ""}, requester_id=author.id)


def test_delete_prompt_removes_reviews(catalog, make_prompt, author, db_session):
    prompt = make_prompt()
    catalog.add_review(prompt.id, {"rating": 4}, user_id=author.id)

    catalog.delete_prompt(prompt.id, requester_id=author.id)

    assert db_session.query(Prompt).count() == 0
    assert db_session.query(Review).count() == 0


def test_delete_prompt_by_other_user(catalog, make_prompt, other_user, db_session):
    prompt = make_prompt()
    with pytest.raises(ForbiddenError):
        catalog.delete_prompt(prompt.id, requester_id=other_user.id)
    assert db_session.query(Prompt).count() == 1


def test_increment_usage(catalog, make_prompt):
    prompt = make_prompt()
    assert catalog.increment_usage(prompt.id) == 1
    assert catalog.increment_usage(prompt.id) == 2


def test_increment_usage_missing_prompt(catalog):
    with pytest.raises(NotFoundError):
        catalog.increment_usage("missing")


def test_concurrent_increment_usage_loses_no_updates(database, activity, make_prompt):
    """Test parallel usage increments all land."""
    prompt = make_prompt()
    workers, per_worker = 5, 4

    def use_many():
        for _ in range(per_worker):
            session = database.session()
            try:
                PromptCatalog(session, activity).increment_usage(prompt.id)
            finally:
                session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(use_many) for _ in range(workers)]
        for future in futures:
            future.result()

    session = database.session()
    try:
        count = session.query(Prompt.usage_count).filter(Prompt.id == prompt.id).scalar()
    finally:
        session.close()
    assert count == workers * per_worker


def test_add_review_updates_rating(catalog, make_prompt, author, db_session):
    prompt = make_prompt()
    catalog.add_review(prompt.id, {"rating": 4}, user_id=author.id)
    catalog.add_review(prompt.id, {"rating": 2, "comment": "Meh"}, user_id=author.id)

    db_session.refresh(prompt)
    assert prompt.rating == 3.0
    assert len(prompt.reviews) == 2


@pytest.mark.parametrize("rating", [0, 6, None, 4.5, "5"])
def test_add_review_rejects_bad_rating(catalog, make_prompt, author, db_session, rating):
    """Test invalid ratings write nothing and leave the cached rating alone."""
    prompt = make_prompt()
    with pytest.raises(ValidationError):
        catalog.add_review(prompt.id, {"rating": rating}, user_id=author.id)

    assert db_session.query(Review).count() == 0
    db_session.refresh(prompt)
    assert prompt.rating == 0.0


def test_add_review_missing_prompt(catalog, author):
    with pytest.raises(NotFoundError):
        catalog.add_review("missing", {"rating": 5}, user_id=author.id)


def test_add_review_parent_must_be_on_same_prompt(catalog, make_prompt, author):
    first = make_prompt(title="First")
    second = make_prompt(title="Second")
    review = catalog.add_review(first.id, {"rating": 5}, user_id=author.id)

    with pytest.raises(ValidationError):
        catalog.add_review(second.id, {"rating": 3, "parent_review_id": review.id}, user_id=author.id)

    reply = catalog.add_review(first.id, {"rating": 3, "parent_review_id": review.id}, user_id=author.id)
    assert reply.parent_review_id == review.id


def test_list_tags_counts_usage(catalog, make_prompt):
    make_prompt(tags=["common", "rare"])
    make_prompt(tags=["common"])

    assert catalog.list_tags() == [("common", 2), ("rare", 1)]


def test_list_tags_skips_unused_tags(catalog, make_prompt, author):
    """Test tags no prompt carries any more are not listed."""
    retagged = make_prompt(tags=["old", "kept"])
    deleted = make_prompt(tags=["gone"])

    catalog.update_prompt(retagged.id, {"tags": ["kept", "new"]}, requester_id=author.id)
    catalog.delete_prompt(deleted.id, requester_id=author.id)

    assert catalog.list_tags() == [("kept", 1), ("new", 1)]


@pytest.fixture
def fk_database(tmp_path):
    """A database that enforces foreign keys."""
    database = Database(f"sqlite:///{tmp_path / 'fk.db'}")

    @event.listens_for(database.engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    database.init_db()
    yield database
    database.dispose()


def test_delete_prompt_with_threaded_replies_under_foreign_keys(fk_database):
    """Test replies are removed before the rows they point at."""
    session = fk_database.session()
    try:
        author = User(email="fk@example.com", name="FK")
        session.add(author)
        session.commit()

        catalog = PromptCatalog(session, ActivityService(fk_database))
        prompt = catalog.create_prompt({"title": "Threaded", "prompt": "Body"}, author_id=author.id)

        # The parent ids sort before the replies
        session.add(Review(id="aaaa", prompt_id=prompt.id, user_id=author.id, rating=5))
        session.add(Comment(id="aaaa", prompt_id=prompt.id, user_id=author.id, content="Parent"))
        session.commit()
        session.add(Review(id="bbbb", prompt_id=prompt.id, user_id=author.id, rating=3, parent_review_id="aaaa"))
        session.add(Comment(id="bbbb", prompt_id=prompt.id, user_id=author.id, content="Reply", parent_id="aaaa"))
        session.commit()

        catalog.delete_prompt(prompt.id, requester_id=author.id)

        assert session.query(Prompt).count() == 0
        assert session.query(Review).count() == 0
        assert session.query(Comment).count() == 0
    finally:
        session.close()
