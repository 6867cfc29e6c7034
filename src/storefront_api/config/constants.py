"""
Centralized application constants.

Single point of truth for order workflow constants shared by the
services and the HTTP layer.
"""

# ==============================================================================
# ORDER NUMBERING
# ==============================================================================

# Seed used when no order exists yet; the first order becomes "00001"
ORDER_NUMBER_BOOTSTRAP = "00000"

# ==============================================================================
# ORDER DOMAIN
# ==============================================================================

CHANNEL_ONLINE = "online"
CHANNEL_IN_STORE = "in-store"

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_CANCELED = "canceled"

# Minimum quantity for a single order line
MIN_ITEM_QUANTITY = 1

# ==============================================================================
# ROLES
# ==============================================================================

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"
ROLE_CASHIER = "cashier"

# ==============================================================================
# LISTING
# ==============================================================================

DEFAULT_PAGE_LIMIT = 20
DEFAULT_PAGE_OFFSET = 0

# Largest id or paging value accepted from a query string (signed 32-bit)
MAX_QUERY_INT = 2**31 - 1

# Timestamp format for order projections (RFC 3339, UTC)
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
