"""API-related constants."""

# HTTP Status Codes
HTTP_500_INTERNAL_SERVER_ERROR = 500

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Content types
HAL_MEDIA_TYPE = "application/hal+json"

# Path segment holding the search queries of a collection
SEARCH_PATH = "search"

# Range of INTEGER columns, 32-bit signed on PostgreSQL and MariaDB
MIN_INTEGER_VALUE = -2_147_483_648
MAX_INTEGER_VALUE = 2_147_483_647

MAX_PAGE_NUMBER = MAX_INTEGER_VALUE

# Entity ids are 64-bit signed integers
MAX_ENTITY_ID = 9_223_372_036_854_775_807

# Request logging
MAX_USER_AGENT_LENGTH = 200
