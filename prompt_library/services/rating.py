from typing import Iterable

from sqlalchemy.orm import Session

from prompt_library.models import Prompt, Review

MIN_RATING = 1
MAX_RATING = 5


def is_valid_rating(value) -> bool:
    # bool is an int subclass; True must not count as a 1-star review
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_RATING <= value <= MAX_RATING


def mean_rating(ratings: Iterable[int]) -> float:
    """Arithmetic mean of the ratings, 0 when there are none."""
    ratings = list(ratings)
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def recompute_rating(db: Session, prompt_id: str) -> float:
    """
    Re-read every review of a prompt and store their mean on Prompt.rating.

    This is a plain read-then-write; two reviewers committing at the same
    moment can each compute a mean that misses the other's review. The next
    review on the prompt brings the cached value back in line.
    """
    ratings = [rating for (rating,) in db.query(Review.rating).filter(Review.prompt_id == prompt_id).all()]
    average = mean_rating(ratings)
    db.query(Prompt).filter(Prompt.id == prompt_id).update(
        {Prompt.rating: average}, synchronize_session=False
    )
    db.commit()
    return average
