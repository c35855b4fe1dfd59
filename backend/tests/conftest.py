"""Root conftest — shared test configuration."""

import os

# Ensure tests never point at a real database
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("SERVER_NAME", "test.example.org")
