"""
Create the schema and optionally seed an admin account.

    python -m app.db.init_db
    python -m app.db.init_db --admin-email admin@example.com --admin-password secret123
"""
import argparse
import logging
from app.db.session import SessionLocal, init_db
from app.models.user import UserRole
from app.schemas.user import UserCreate
from app.services import user_service

logger = logging.getLogger(__name__)


def seed_admin(email: str, password: str, name: str = "Admin"):
    """Create an admin user, or promote an existing account with that email."""
    db = SessionLocal()
    try:
        user = user_service.get_user_by_email(email, db)
        if user:
            user.role = UserRole.ADMIN
            db.commit()
            logger.info(f"Promoted existing user {user.id} to admin")
            return user
        return user_service.create_user(
            UserCreate(email=email, name=name, password=password), db, role=UserRole.ADMIN
        )
    finally:
        db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Initialize the Splitbill database")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args(argv)
    
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    init_db()
    if args.admin_email:
        if not args.admin_password:
            parser.error("--admin-password is required with --admin-email")
        seed_admin(args.admin_email, args.admin_password)


if __name__ == "__main__":
    main()
