"""Settings used by the test suite: in-memory SQLite, quiet logging."""

from .settings import *  # noqa: F401,F403
from .settings import LOGGING

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Cheap hashing keeps bcrypt from dominating test runtime.
BCRYPT_ROUNDS = 4

LOGGING = {
    **LOGGING,
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {name: {**config, "level": "WARNING"} for name, config in LOGGING["loggers"].items()},
}
