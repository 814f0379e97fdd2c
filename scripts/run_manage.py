#!/usr/bin/env python
"""
Run Django management commands for Keel from the project root.

Values in .env win over the shell environment for the variables that
decide where a run writes (DATABASE_URL) and what it calls out to
(segmentation backend and key), so a stale export cannot point a daily
run at the wrong database.

Usage:
    python scripts/run_manage.py <command> [args...]

Examples:
    python scripts/run_manage.py migrate
    python scripts/run_manage.py generate_game --all-modes --trigger cron
    python scripts/run_manage.py export_ship_list --output public/ship-list.json
    python scripts/run_manage.py runserver
"""

import os
import sys
from pathlib import Path

from dotenv import dotenv_values

PROJECT_ROOT = Path(__file__).resolve().parent.parent
os.chdir(PROJECT_ROOT)
sys.path.insert(0, str(PROJECT_ROOT))

OVERRIDE_KEYS = (
    "DATABASE_URL",
    "KEEL_SEGMENTATION_BACKEND",
    "KEEL_SEGMENTATION_API_KEY",
)


def load_env_with_override():
    """Force .env values for OVERRIDE_KEYS over anything exported in the shell."""
    env_path = PROJECT_ROOT / ".env"
    if not env_path.exists():
        return

    env_vars = dotenv_values(env_path)
    for key in OVERRIDE_KEYS:
        env_value = env_vars.get(key)
        if not env_value:
            continue
        current = os.environ.get(key, "")
        if current and current != env_value:
            print(f"Overriding shell {key} with the value from .env", file=sys.stderr)
        os.environ[key] = env_value


def main():
    load_env_with_override()
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "keel.settings")

    from django.core.management import execute_from_command_line

    execute_from_command_line(["manage.py"] + sys.argv[1:])


if __name__ == "__main__":
    main()
