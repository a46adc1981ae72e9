"""Settings for the pytest run: SQLite, local-memory cache, eager Celery."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production-use-only")

from config.settings import *  # noqa: E402,F401,F403

DATABASES = {
    "default": config(  # noqa: F405
        "TEST_DATABASE_URL", default="sqlite:///:memory:", cast=db_url  # noqa: F405
    )
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {  # noqa: F405
    "anon": "10000/minute",
    "user": "10000/minute",
    "order_creation": "10000/minute",
    "order_listing": "10000/minute",
}
