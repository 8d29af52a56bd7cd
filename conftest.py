"""Test environment defaults, applied before the app modules are imported."""

import os

# The app builds its engine lazily from DATABASE_URL; tests override the session anyway
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
# Keep rate limiting process-local during tests
os.environ.pop("REDIS_URL", None)
