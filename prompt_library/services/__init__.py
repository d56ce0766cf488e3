from prompt_library.services.summary import SummaryHeuristic, generate_summary
from prompt_library.services.authorization import AccessDecision, check_owner
from prompt_library.services.activity_service import ActivityService, RequestMeta
from prompt_library.services.prompt_catalog import PromptCatalog
from prompt_library.services.category_registry import CategoryRegistry
from prompt_library.services.comment_service import CommentService
from prompt_library.services.stats_service import StatsService
from prompt_library.services.auth_service import AuthService

__all__ = [
    "SummaryHeuristic",
    "generate_summary",
    "AccessDecision",
    "check_owner",
    "ActivityService",
    "RequestMeta",
    "PromptCatalog",
    "CategoryRegistry",
    "CommentService",
    "StatsService",
    "AuthService",
]
