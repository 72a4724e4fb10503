from enum import Enum

class Role(str, Enum):
    """Enumerates every role recognised by the platform.

    Using an Enum avoids typos when referring to roles across the code-base
    while still being JSON-serialisable (inherits from *str*).
    """

    buyer = "buyer"
    seller = "seller"
    agent = "agent"
    manager = "manager"
    admin = "admin"


class VerificationStatus(str, Enum):
    """Agent verification state stored on the account."""

    none = "none"
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


class ManagerApplicationStatus(str, Enum):
    none = "none"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class PropertyStatus(str, Enum):
    pending = "pending"
    active = "active"
    sold = "sold"
    off_market = "off-market"


class PropertyType(str, Enum):
    house = "house"
    condo = "condo"
    townhouse = "townhouse"
    land = "land"
    commercial = "commercial"


# Roles a user may pick for themselves (selection, registration, add-role)
SELF_SERVICE_ROLES = frozenset({Role.buyer.value, Role.seller.value, Role.agent.value})
