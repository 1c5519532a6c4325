#!/usr/bin/env python3
"""
Create the tables (if missing) and an admin account.

Registration over HTTP only ever creates beneficiaries; admins are created
here, already verified.

Usage:
  python3 scripts/create_admin.py --email admin@example.org --first-name Ada --last-name Admin
  (the password is read from DONATION_ADMIN_PASSWORD or prompted for)
"""

import argparse
import getpass
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create an admin account")
    p.add_argument("--config", default=None, help="Configuration YAML")
    p.add_argument("--email", required=True)
    p.add_argument("--first-name", required=True)
    p.add_argument("--last-name", required=True)
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)

    from donation_config import get_active_config
    from donation_config.bridges import configure_logging_from_config, init_engine_from_config
    from donation_kernel.db.engine import create_tables, session_scope
    from donation_kernel.models import User, UserRole
    from donation_kernel.repository import Repository
    from donation_services import hash_password

    config = get_active_config(args.config)
    configure_logging_from_config(config)
    init_engine_from_config(config)
    create_tables()

    password = os.environ.get("DONATION_ADMIN_PASSWORD") or getpass.getpass("Admin password: ")
    if len(password) < config.auth.min_password_length:
        print(
            f"  ERROR: password must be at least {config.auth.min_password_length} characters",
            file=sys.stderr,
        )
        return 1

    with session_scope() as session:
        repo = Repository(session)
        if repo.get_user_by_email(args.email) is not None:
            print(f"  ERROR: {args.email} is already registered", file=sys.stderr)
            return 1
        user = repo.create_user(
            User(
                email=args.email,
                first_name=args.first_name,
                last_name=args.last_name,
                password_hash=hash_password(password, config.auth.password_hash_iterations),
                role=UserRole.ADMIN.value,
                is_verified=True,
            )
        )
        user_id = user.id

    print(f"  Created admin {args.email} ({user_id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
