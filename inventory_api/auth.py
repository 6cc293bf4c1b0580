"""Identity gate.

Stands in for the external authentication service: callers present
``X-Actor-Id`` (UUID) and ``X-Actor-Role``; ``X-Actor-Name`` is optional
and only used for event payloads.  Token issuance and user management
live outside this service.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status


class Role(str, Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    VIEWER = "VIEWER"


@dataclass(frozen=True)
class Actor:
    id: UUID
    role: Role
    name: str | None = None


def get_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
    x_actor_name: str | None = Header(default=None),
) -> Actor:
    """Resolve the caller; 401 when identity is missing or malformed."""
    if not x_actor_id or not x_actor_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    try:
        actor_id = UUID(x_actor_id)
        role = Role(x_actor_role.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        ) from None
    return Actor(id=actor_id, role=role, name=x_actor_name)


def require_write_role(request: Request, actor: Actor = Depends(get_actor)) -> Actor:
    """403 unless the caller's role may mutate state."""
    if actor.role.value not in request.app.state.config.api.write_roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return actor
