"""Storefront database management CLI.

Provides commands to create and drop the database schema and to bootstrap
an administrator account.

Usage:
    python src/manage.py setup-db       # Create all tables
    python src/manage.py drop-db        # Drop all tables
    python src/manage.py create-admin --email admin@example.com --password s3cret --mobile 9876543210
"""

import argparse
import sys

from identity.user.administration import PromoteToAdmin, UserAdministrationHandler
from shared.config import Config
from shared.exceptions import StorefrontError
from shared.logging import configure_logging
from shared.store import Store, drop_db, setup_db


def _store() -> Store:
    return Store(Config.from_env().database_url)


def setup_database():
    """Create all tables."""
    store = _store()
    print("Creating database schema...")
    setup_db(store)
    store.dispose()
    print("Done.")


def drop_database():
    """Drop all tables."""
    store = _store()
    print("Dropping database schema...")
    drop_db(store)
    store.dispose()
    print("Done.")


def create_admin(email: str, password: str, name: str, mobile: str | None) -> int:
    """Grant admin to the account with ``email``, registering it first if needed."""
    store = _store()
    setup_db(store)
    try:
        user = UserAdministrationHandler(store).promote_to_admin(
            PromoteToAdmin(email=email, password=password, name=name, mobile=mobile)
        )
    except StorefrontError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        store.dispose()

    print(f"Admin ready: {user.email} ({user.id})")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    admin_parser = subparsers.add_parser("create-admin", help="Create or promote an administrator")
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--password", required=True)
    admin_parser.add_argument("--name", default="Administrator")
    admin_parser.add_argument("--mobile", help="Required when the account does not exist yet")

    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "create-admin":
        sys.exit(create_admin(args.email, args.password, args.name, args.mobile))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
