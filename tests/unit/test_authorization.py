import pytest
from prompt_library.errors import ForbiddenError
from prompt_library.services.authorization import AccessDecision, check_owner, require_owner


def test_owner_is_allowed():
    assert check_owner("user-1", "user-1") is AccessDecision.ALLOWED


def test_other_user_is_forbidden():
    assert check_owner("user-1", "user-2") is AccessDecision.FORBIDDEN


def test_ownerless_resource_is_forbidden():
    """Test that resources without an owner cannot be mutated by anyone."""
    assert check_owner(None, "user-1") is AccessDecision.FORBIDDEN


def test_anonymous_requester_is_forbidden():
    assert check_owner("user-1", None) is AccessDecision.FORBIDDEN
    assert check_owner(None, None) is AccessDecision.FORBIDDEN


def test_require_owner_raises_with_message():
    with pytest.raises(ForbiddenError) as exc_info:
        require_owner("user-1", "user-2", "You can only edit your own prompts")

    assert exc_info.value.message == "You can only edit your own prompts"
    assert exc_info.value.status_code == 403


def test_require_owner_passes_for_owner():
    require_owner("user-1", "user-1", "unused")
