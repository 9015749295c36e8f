"""Global pytest configuration."""

import os

# Settings are read at import time; point them at SQLite before any app import.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.pop("REDIS_URL", None)
