STATUS_TABLE = "Status"
ROLE_TABLE = "Role"

STATUS_ACTIVE = "Active"
STATUS_INACTIVE = "Inactive"
STATUS_SUSPENDED = "Suspended"
STATUS_PENDING = "Pending"

STATUS_VALUES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_SUSPENDED, STATUS_PENDING)

NOT_MODIFIED = "Not modified"

_STATUS_COLORS = {
    "active": "green",
    "inactive": "gray",
    "suspended": "red",
    "pending": "orange",
}


def status_color(status: str | None) -> str:
    return _STATUS_COLORS.get((status or "").lower(), "blue")
