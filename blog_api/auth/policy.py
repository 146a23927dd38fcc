"""
Ownership policy for mutations.

Only the user who created a post or comment may update or delete it.
There are no roles and no admin override.  Callers must confirm the
resource exists (404) before asking the policy (403), so a missing
resource never reveals anything about ownership.
"""
import logging

from blog_api.errors import AuthorizationError

logger = logging.getLogger(__name__)


def can_mutate(actor_id: int, owner_id: int) -> bool:
    return actor_id == owner_id


def ensure_can_mutate(actor_id: int, resource, kind: str, action: str = "modify") -> None:
    """Raise ``AuthorizationError`` unless *actor_id* owns *resource*."""
    if not can_mutate(actor_id, resource.user_id):
        logger.warning(
            "User %d tried to %s %s %d owned by user %d",
            actor_id,
            action,
            kind,
            resource.id,
            resource.user_id,
            extra={"user_id": actor_id},
        )
        raise AuthorizationError(f"you do not have permission to {action} this {kind}")
