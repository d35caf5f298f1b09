"""Root conftest — shared test configuration."""

import os

# Keep tests off any developer database and away from .env overrides
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LIVE_THRESHOLD", "10")
os.environ.setdefault("LOG_FORMAT", "text")
