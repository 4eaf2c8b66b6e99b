from __future__ import annotations

import enum

from devcamper.core.errors import Unauthorized
from devcamper.models.user import ROLE_ADMIN, User


class Capability(enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    OTHER = "other"


def capability_for(user: User, owner_id) -> Capability:
    if owner_id is not None and str(user.id) == str(owner_id):
        return Capability.OWNER
    if user.role == ROLE_ADMIN:
        return Capability.ADMIN
    return Capability.OTHER


def ensure_owner_or_admin(user: User, owner_id, message: str) -> Capability:
    capability = capability_for(user, owner_id)
    if capability is Capability.OTHER:
        raise Unauthorized(message)
    return capability
