"""Request context for tenancy enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Request context containing org and user identity.

    Every catalogue, tour and partner query is scoped to org_id; user_id is
    recorded as the author of saved tours.
    """

    org_id: UUID
    user_id: UUID
