from prompt_library.models.user import User
from prompt_library.models.category import Category
from prompt_library.models.tag import Tag, prompt_tags
from prompt_library.models.prompt import Prompt, Difficulty, DEFAULT_CATEGORY, DEFAULT_ESTIMATED_TIME
from prompt_library.models.review import Review
from prompt_library.models.comment import Comment
from prompt_library.models.activity import UserActivity, ActivityAction

__all__ = [
    "User",
    "Category",
    "Tag",
    "prompt_tags",
    "Prompt",
    "Difficulty",
    "DEFAULT_CATEGORY",
    "DEFAULT_ESTIMATED_TIME",
    "Review",
    "Comment",
    "UserActivity",
    "ActivityAction",
]
