# testdrive/seed.py
"""Maintenance commands.

    python -m testdrive.seed testimonials
    python -m testdrive.seed admin --email admin@example.com --name Admin --password s3cret!
"""
import argparse
import sys

from . import crud
from .config import Settings
from .db import init_db, make_engine, make_session_factory
from .models import Role
from .security import hash_password
from .services import testimonials
from .utils import configure_logging, get_logger

logger = get_logger("seed")


def create_admin(db, name, email, password):
    """Create an admin account, or promote an existing account to admin."""
    user = crud.get_user_by_email(db, email)
    if user is None:
        user = crud.create_user(db, {
            "name": name,
            "email": email,
            "password_hash": hash_password(password),
            "role": Role.ADMIN,
        })
        logger.info("Created admin %s (%s)", user.email, user.id)
    else:
        user = crud.update_user(db, user, {"role": Role.ADMIN, "password_hash": hash_password(password)})
        logger.info("Promoted %s to admin", user.email)
    return user


def main(argv=None):
    parser = argparse.ArgumentParser(prog="testdrive.seed")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("testimonials", help="replace testimonials with the default set")
    admin = sub.add_parser("admin", help="create or promote an admin account")
    admin.add_argument("--email", required=True)
    admin.add_argument("--name", default="Admin")
    admin.add_argument("--password", required=True)
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    engine = make_engine(settings.database_url, settings.db_pool_size, settings.db_max_overflow)
    init_db(engine)
    db = make_session_factory(engine)()
    try:
        if args.command == "testimonials":
            testimonials.seed_defaults(db)
        else:
            create_admin(db, args.name, args.email, args.password)
    except Exception:
        logger.exception("%s seeding failed", args.command)
        return 1
    finally:
        db.close()
        engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
