import enum
from typing import Optional

from prompt_library.errors import ForbiddenError


class AccessDecision(str, enum.Enum):
    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"


def check_owner(owner_id: Optional[str], requester_id: Optional[str]) -> AccessDecision:
    """Only the recorded owner may mutate a resource; ownerless rows are read-only."""
    if owner_id is None or requester_id is None:
        return AccessDecision.FORBIDDEN
    if owner_id != requester_id:
        return AccessDecision.FORBIDDEN
    return AccessDecision.ALLOWED


def require_owner(owner_id: Optional[str], requester_id: Optional[str], message: str):
    if check_owner(owner_id, requester_id) is AccessDecision.FORBIDDEN:
        raise ForbiddenError(message)
