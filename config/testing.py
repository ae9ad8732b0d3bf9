SECRET_KEY = "test-secret"

STORAGE_CONFIG = {
    "bucket": "stamp-rally-test",
    "region": "ap-northeast-1",
    "endpoint_url": None,
    "conditional_writes": True,
}

ADMIN_USER = "admin"
ADMIN_PASS = "test-pass"

USER_COOKIE_SECURE = False
USER_COOKIE_MAX_AGE_DAYS = 30

MAX_ICON_BYTES = 1024

STATS_UNFILTERED_DENOMINATOR = "files"

DEBUG = False
TESTING = True
