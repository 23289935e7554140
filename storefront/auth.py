from enum import Enum
from typing import Optional

from fastapi import Depends, Header, HTTPException

from storefront.core.logger import get_logger

logger = get_logger(__name__)

ROLE_HEADER = "X-Auth-Role"


class Capability(str, Enum):
    GUEST = "guest"
    ADMIN = "admin"


def resolve_capability(role_claim: Optional[str]) -> Capability:
    """Map the role claim issued by the identity provider to a capability.

    Anything other than an explicit admin claim is treated as a guest.
    """
    if role_claim and role_claim.strip().lower() == Capability.ADMIN.value:
        return Capability.ADMIN
    return Capability.GUEST


def get_capability(x_auth_role: Optional[str] = Header(None, alias=ROLE_HEADER)) -> Capability:
    return resolve_capability(x_auth_role)


def require_admin(capability: Capability = Depends(get_capability)) -> Capability:
    if capability is not Capability.ADMIN:
        logger.warning("Rejected admin request with capability '%s'", capability.value)
        raise HTTPException(status_code=403, detail="Admin capability required.")
    return capability
