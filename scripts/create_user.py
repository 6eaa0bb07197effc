"""Create a local user in the application's database.

Usage (from repository root):
python scripts/create_user.py --username admin --password secret --role Admin --tenant acme

This script ensures the project's `src` directory is on sys.path so the
local `menu_service` package can be imported. It calls `init_db()` to prepare
the DB and then creates/updates a user with `create_user`.
"""

import argparse
import os
import sys
from getpass import getpass

# Ensure src is on path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from menu_service.db import SessionLocal
from menu_service.db.init_db import init_db
from menu_service.models.tenant import Tenant
from menu_service.utils.auth import create_user


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--username", required=False)
    parser.add_argument("--password", required=False)
    parser.add_argument("--role", default="Staff", help="Role display name (e.g. Admin, Manager, Staff)")
    parser.add_argument("--tenant", help="Tenant slug; omitted for platform users")
    parser.add_argument("--branch", help="Default branch ID used for menu resolution")
    args = parser.parse_args()

    username = args.username or input("username: ")
    password = args.password or getpass("password: ")

    # initialize DB (creates tables if needed)
    init_db()

    db = SessionLocal()
    try:
        tenant_id = None
        if args.tenant:
            tenant = db.query(Tenant).filter(Tenant.slug == args.tenant).one_or_none()
            if tenant is None:
                print(f"Unknown tenant: {args.tenant}")
                sys.exit(1)
            tenant_id = tenant.id
        user = create_user(db, username, password, role_name=args.role, tenant_id=tenant_id, branch_id=args.branch)
        print(f"Created/updated user: {user.username} (role={user.role_name}, tenant={user.tenant_id})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
