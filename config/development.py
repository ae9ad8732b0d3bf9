import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

STORAGE_CONFIG = {
    "bucket": os.getenv("STAMP_BUCKET", "stamp-rally-dev"),
    "region": os.getenv("AWS_REGION", "ap-northeast-1"),
    # e.g. http://localhost:9000 for a local MinIO
    "endpoint_url": os.getenv("S3_ENDPOINT_URL") or None,
    "conditional_writes": bool(int(os.getenv("S3_CONDITIONAL_WRITES", "1"))),
}

ADMIN_USER = os.getenv("ADMIN_USER", "admin")
ADMIN_PASS = os.getenv("ADMIN_PASS", "changeme")

USER_COOKIE_SECURE = False
USER_COOKIE_MAX_AGE_DAYS = int(os.getenv("USER_COOKIE_MAX_AGE_DAYS", "30"))

MAX_ICON_BYTES = 5 * 1024 * 1024

# "files": all-time view divides by listed record files; "active": by users with acquisitions
STATS_UNFILTERED_DENOMINATOR = os.getenv("STATS_UNFILTERED_DENOMINATOR", "files")

DEBUG = True
