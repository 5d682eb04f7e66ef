"""Create (or reset) a full-access employee.

Usage: python scripts/create_admin.py admin@example.com "Admin Name" [password]
The password falls back to ADMIN_PASSWORD, then to an interactive prompt.
"""

from __future__ import annotations

import getpass
import importlib
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.team_portal.team_portal.core.constants import MIN_PASSWORD_LENGTH
from src.team_portal.team_portal.database.bootstrap import ensure_admin_employee


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print(__doc__)
        return 2
    email, name = argv[0], argv[1]
    password = argv[2] if len(argv) > 2 else os.getenv("ADMIN_PASSWORD") or getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return 1

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    employee_id = ensure_admin_employee(dict(settings.DB_CONFIG), email=email, name=name, password=password)
    print(f"OK: full-access employee {email} ({employee_id})")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
