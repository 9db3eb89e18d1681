# utils/tokenJWT.py
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models import users as models
from utils.errors import AuthorizationError
from utils.permissions import Action, can

# Authorization scheme
bearer_scheme = HTTPBearer()

# Generate a new JWT access token
def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

# Resolve a raw token to its user, or None when the token is invalid
def user_from_token(token: Optional[str], db: Session) -> Optional[models.User]:
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    email = payload.get("sub")
    if email is None:
        return None
    return db.query(models.User).filter(models.User.email == email).first()

# Retrieve the currently authenticated user based on the JWT token
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
):
    user = user_from_token(credentials.credentials, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    # Accounts stay locked until an administrator approves them
    if not user.is_authorized:
        raise AuthorizationError("Account awaiting administrator approval")
    return user

# Dependency factory checking the capability table for the acting user
def capability_required(action: Action):
    def _checker(current_user: models.User = Depends(get_current_user)):
        if not can(current_user.role, action):
            raise AuthorizationError(f"Role '{current_user.role}' may not {action.value.replace('_', ' ')}")
        return current_user
    return _checker
