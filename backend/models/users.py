# backend/models/users.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from database import Base

# Represents a user account with authentication details, system role and approval flag
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="storekeeper") # One of utils.permissions.UserRole
    display_name = Column(String, nullable=True)

    # New sign-ups wait for an administrator before they can log in
    is_authorized = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
