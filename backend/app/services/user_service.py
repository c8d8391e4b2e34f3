"""
User service for registration, authentication and profile updates.
"""
import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from app.core.security import hash_password, verify_password
from app.models.user import User, UserRole
from app.core.utils import partial_update
from app.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

USER_NULLABLE_FIELDS = ("name", "bank_info", "avatar_url")


def get_user(user_id: int, db: Session) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(email: str, db: Session) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.id.asc()).all()


def create_user(user_data: UserCreate, db: Session, role: UserRole = UserRole.USER) -> User:
    """
    Register a user with a hashed password.
    Raises ValueError if the email is already registered.
    """
    if get_user_by_email(user_data.email, db):
        raise ValueError("Email already exists")
    
    user = User(
        email=user_data.email,
        name=user_data.name,
        hashed_password=hash_password(user_data.password),
        role=role
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    
    logger.info(f"Registered user {user.id} ({user.role.value})")
    return user


def authenticate_user(email: str, password: str, db: Session) -> Optional[User]:
    """The user matching the credentials, or None. Inactive users are returned as-is."""
    user = get_user_by_email(email, db)
    if not user or not verify_password(password, user.hashed_password):
        logger.info("Failed login attempt")
        return None
    return user


def update_user(user: User, user_data: UserUpdate, db: Session) -> User:
    """Apply a partial profile update; a new password is re-hashed."""
    changes = partial_update(user_data, nullable=USER_NULLABLE_FIELDS)
    
    password = changes.pop("password", None)
    if password:
        user.hashed_password = hash_password(password)
    
    for field, value in changes.items():
        setattr(user, field, value)
    
    db.commit()
    db.refresh(user)
    return user
