"""Create the schema and the admin account without starting the API.

Usage:
  python scripts/init_db.py

The admin is only created when none exists (AUTH_BOOTSTRAP_ADMIN_USERNAME /
AUTH_BOOTSTRAP_ADMIN_PASSWORD, default admin / admin123).
"""

import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from c4knives.auth.crud import bootstrap_admin_if_needed
from c4knives.config import load_config
from c4knives.db import init_db


def main() -> None:
    cfg = load_config()
    init_db(cfg.DB_DSN)

    admin = bootstrap_admin_if_needed(cfg)
    if admin:
        print(f"Created admin account: {admin['username']} ({admin['id']})")
    else:
        print("Admin account already present; left unchanged.")

    print(f"DB initialized: {cfg.DB_DSN}")


if __name__ == "__main__":
    main()
