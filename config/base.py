"""Settings shared by every environment; each env module overrides what differs."""

import os


def _flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "team_portal"),
}

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
TOKEN_TTL_DAYS = int(os.getenv("TOKEN_TTL_DAYS", "7"))

# Attachments: local directory unless a remote object-storage API is configured.
UPLOADS_DIR = os.getenv("UPLOADS_DIR", "uploads")
STORAGE_BASE_URL = os.getenv("STORAGE_BASE_URL", "")
STORAGE_TIMEOUT_SECONDS = float(os.getenv("STORAGE_TIMEOUT_SECONDS", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

AUTO_INIT_DB = _flag("AUTO_INIT_DB")
