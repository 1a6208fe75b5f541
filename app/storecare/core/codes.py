import uuid

CATEGORY_PREFIX = "CAT"
PRODUCT_PREFIX = "PRD"
STORE_PREFIX = "ST"
STORE_ADMIN_PREFIX = "SADM"
CUSTOMER_PREFIX = "CUST"
SUPERADMIN_PREFIX = "SUP"


def generate_code(prefix: str, length: int = 8) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:length].upper()}"
