#!/usr/bin/env python3
"""
Create the first ADMIN account, or promote an existing user to ADMIN.

Usage:
    python scripts/create_admin.py --email admin@example.com --name Administrator
    python scripts/create_admin.py --email admin@example.com --password '...' --token

The password is prompted for when --password is omitted. With --token a
signed access token for the account is printed as well.
"""

import argparse
import getpass
import os
import sys

# Ensure project root on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from hvacdesk.core.security import create_access_token, get_password_hash  # noqa: E402
from hvacdesk.db import base  # noqa: E402,F401
from hvacdesk.db.session import SessionLocal  # noqa: E402
from hvacdesk.repositories.user import UserRepository  # noqa: E402
from hvacdesk.schemas.actor import Role  # noqa: E402
from hvacdesk.schemas.user import UserCreate  # noqa: E402


def create_or_promote_admin(db, email: str, name: str, password: str):
    repo = UserRepository(db)
    user = repo.get_by_email(email)
    if user:
        repo.update(user.id, {
            "role": Role.ADMIN.value,
            "hashed_password": get_password_hash(password),
            "is_active": True,
        })
        db.commit()
        return user, False

    user_in = UserCreate(email=email, name=name, password=password, role=Role.ADMIN)
    user = repo.create_user(user_in, get_password_hash(password))
    db.commit()
    return user, True


def main():
    parser = argparse.ArgumentParser(description="Create or promote an ADMIN user")
    parser.add_argument("--email", default="admin@example.com")
    parser.add_argument("--name", default="Administrator")
    parser.add_argument("--password", help="prompted for when omitted")
    parser.add_argument("--token", action="store_true", help="also print an access token")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user, created = create_or_promote_admin(db, args.email, args.name, password)
        print(f"Admin {'created' if created else 'promoted'}, id: {user.id}")
        print(f"Email: {user.email}")
        if args.token:
            print(create_access_token({"sub": user.id, "role": Role.ADMIN.value}))
    except Exception as e:
        db.rollback()
        print(f"Error creating admin: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
