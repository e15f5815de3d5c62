#!/usr/bin/env python3
"""
Create the database schema and, optionally, provision an admin account.

    python -m jobboard.migrate
    python -m jobboard.migrate --create-admin admin@example.com --password 's3cret!' --name Admin

Signup never creates admins unless ALLOW_ADMIN_SIGNUP is set, so this is the
normal way to bootstrap the first one.
"""

import argparse
import sys

from sqlalchemy.orm import Session

from jobboard.app.config import load_settings
from jobboard.app.database import build_engine, build_session_factory, init_db
from jobboard.app.models.enums import Role
from jobboard.app.models.user import User
from jobboard.app.utils.error_handlers import AppError
from jobboard.app.utils.security import hash_password
from jobboard.app.utils.validation import validate_email, validate_password


def create_admin(db: Session, *, email: str, password: str, name: str) -> User:
    email = validate_email(email)
    validate_password(password)

    user = db.query(User).filter(User.email == email).first()
    if user:
        # Existing accounts are promoted in place and unblocked.
        user.role = Role.ADMIN.value
        user.is_blocked = False
    else:
        user = User(name=name, email=email, password=hash_password(password), role=Role.ADMIN.value)
        db.add(user)
    db.commit()
    db.refresh(user)
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Initialise the job board database.")
    parser.add_argument("--create-admin", metavar="EMAIL", help="Create (or promote) an admin account")
    parser.add_argument("--password", help="Password for a newly created admin")
    parser.add_argument("--name", default="Administrator", help="Display name for a newly created admin")
    args = parser.parse_args(argv)

    settings = load_settings()
    engine = build_engine(settings.database_url)

    print("Initializing database with all models...")
    init_db(engine)
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    print("✓ Database initialized successfully")

    if args.create_admin:
        if not args.password:
            parser.error("--password is required with --create-admin")
        session_factory = build_session_factory(engine)
        db = session_factory()
        try:
            user = create_admin(db, email=args.create_admin, password=args.password, name=args.name)
        except AppError as e:
            print(f"✗ Failed to create admin: {e.message}")
            return 1
        finally:
            db.close()
        print(f"✓ Admin account ready: {user.email} (id={user.id})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
