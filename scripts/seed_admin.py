"""
Seed the Admin group and the built-in admin account.

Usage:
    python scripts/seed_admin.py                          # development DB
    python scripts/seed_admin.py --env production
    ADMIN_PASSWORD='S3cret!x' python scripts/seed_admin.py

This script is idempotent — safe to run multiple times. An existing admin
account keeps its password; it is re-activated and re-joined to Admin.
"""

import argparse
import os

from taskflow import create_app
from taskflow.models import db
from taskflow.models.account import ADMIN_GROUP, ADMIN_USERNAME, Account, UserGroup
from taskflow.utils.crypto import hash_password

DEFAULT_PASSWORD = "Admin123!"


def seed_admin_group():
    if db.session.get(UserGroup, ADMIN_GROUP) is None:
        db.session.add(UserGroup(name=ADMIN_GROUP))
        db.session.commit()
        print(f"  Group {ADMIN_GROUP}: created")
    else:
        print(f"  Group {ADMIN_GROUP}: already exists")


def seed_admin_account(password, email=None):
    account = db.session.get(Account, ADMIN_USERNAME)
    if account is None:
        account = Account(
            username=ADMIN_USERNAME,
            email=email,
            password_hash=hash_password(password),
            active=True,
        )
        account.groups = [ADMIN_GROUP]
        db.session.add(account)
        db.session.commit()
        print(f"  Account {ADMIN_USERNAME}: created (password={password})")
        return account

    groups = account.groups
    if ADMIN_GROUP not in groups:
        account.groups = groups + [ADMIN_GROUP]
    account.active = True
    db.session.commit()
    print(f"  Account {ADMIN_USERNAME}: already exists, groups={account.groups}")
    return account


def main():
    parser = argparse.ArgumentParser(description="Seed the Admin group and admin account")
    parser.add_argument("--env", default="development", help="App environment")
    parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL"), help="Admin e-mail address")
    args = parser.parse_args()

    app = create_app(args.env)
    with app.app_context():
        print("=" * 60)
        print("  SEED: Admin group & account")
        print("=" * 60)
        seed_admin_group()
        seed_admin_account(os.getenv("ADMIN_PASSWORD", DEFAULT_PASSWORD), args.email)
        print("\n✅ Seed complete!")


if __name__ == "__main__":
    main()
