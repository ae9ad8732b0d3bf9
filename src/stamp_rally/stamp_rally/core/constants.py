"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

CATALOG_KEY = "stamp-names.json"
USER_RECORD_PREFIX = "user-stamps/"
LOGO_PREFIX = "logos/"
MAP_KEY = "map.png"

JSON_CONTENT_TYPE = "application/json"
DEFAULT_IMAGE_CONTENT_TYPE = "image/png"

USER_COOKIE_NAME = "userId"
DEFAULT_USER_COOKIE_MAX_AGE_DAYS = 30

DEFAULT_MAX_ICON_BYTES = 5 * 1024 * 1024
ALLOWED_ICON_EXTENSIONS = frozenset({"jpeg", "jpg", "png", "gif", "svg"})

STAMP_HASH_BYTES = 16
ACQUIRE_MAX_ATTEMPTS = 3
PERCENT_DECIMALS = 1
