"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE = 1
DEFAULT_MY_PAGE_SIZE = 10
DEFAULT_ALL_PAGE_SIZE = 20
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100

MIN_PASSWORD_LENGTH = 6

DEFAULT_JWT_ALGORITHM = "HS256"
DEFAULT_JWT_EXPIRATION_MINUTES = 60
