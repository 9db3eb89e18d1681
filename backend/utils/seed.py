# backend/utils/seed.py
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from database import commit
from models.users import User
from utils.hashing import get_password_hash
from utils.permissions import UserRole

logger = logging.getLogger(__name__)


# Bootstrap administrator; running it again never duplicates or resets the account
def ensure_admin(db: Session, email: str, password: str) -> User:
    email = email.strip().lower()
    user = db.query(User).filter(func.lower(User.email) == email).first()
    if user:
        return user

    user = User(
        email=email,
        password_hash=get_password_hash(password),
        role=UserRole.ADMIN.value,
        display_name="Administrator",
        is_authorized=True,
    )
    db.add(user)
    commit(db)
    db.refresh(user)
    logger.info(f"Created bootstrap administrator {email}")
    return user
