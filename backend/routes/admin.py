# backend/routes/admin.py
from typing import Optional, Literal
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db, commit
from models.users import User
from schemas.user import UserResponse, UserUpdate, AuthorizationUpdate, UsersPage
from utils.audit import write_log, client_ip
from utils.errors import NotFoundError, ValidationError
from utils.permissions import Action, UserRole
from utils.tokenJWT import capability_required

router = APIRouter(tags=["Admin"])

_admin = capability_required(Action.MANAGE_USERS)


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


# Retrieve a list of users with filtering, sorting, and pagination (Admin only)
@router.get("/users", response_model=UsersPage)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by e-mail or name"),
    role: Optional[UserRole] = Query(None),
    authorized: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "role", "display_name", "created_at"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    current_user: User = Depends(_admin),
):
    query = db.query(User)

    if q:
        like = f"%{q.lower()}%"
        query = query.filter(User.email.ilike(like) | User.display_name.ilike(like))
    if role:
        query = query.filter(User.role == role.value)
    if authorized is not None:
        query = query.filter(User.is_authorized == authorized)

    sort_map = {
        "id": User.id,
        "email": User.email,
        "role": User.role,
        "display_name": User.display_name,
        "created_at": User.created_at,
    }
    col = sort_map.get(sort_by, User.created_at)
    query = query.order_by(col.asc() if order == "asc" else col.desc(), User.id.asc())

    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": users, "total": total, "page": page, "page_size": page_size}


# Update display name and/or role (Admin only)
@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_admin),
):
    user = _get_user(db, user_id)

    if payload.role is not None and user.id == current_user.id and payload.role != UserRole.ADMIN:
        raise ValidationError("You cannot remove your own administrator role")

    if payload.display_name is not None:
        user.display_name = payload.display_name
    if payload.role is not None:
        user.role = payload.role.value
    commit(db)
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_UPDATE", resource="users", ip=client_ip(request),
              meta={"id": user.id, "role": user.role})
    return user


# Grant or revoke access (Admin only)
@router.patch("/users/{user_id}/authorization", response_model=UserResponse)
def set_authorization(
    user_id: int,
    payload: AuthorizationUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_admin),
):
    user = _get_user(db, user_id)
    if user.id == current_user.id and not payload.is_authorized:
        raise ValidationError("You cannot revoke your own access")

    user.is_authorized = payload.is_authorized
    commit(db)
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_AUTHORIZATION", resource="users", ip=client_ip(request),
              meta={"id": user.id, "is_authorized": user.is_authorized})
    return user


# Delete a user account (Admin only)
@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_admin),
):
    user = _get_user(db, user_id)

    # Prevent self-deletion
    if user.id == current_user.id:
        raise ValidationError("You cannot delete your own account")

    email = user.email
    db.delete(user)
    commit(db)

    write_log(db, user_id=current_user.id, action="USER_DELETE", resource="users", ip=client_ip(request),
              meta={"id": user_id, "email": email})
    return {"message": f"User {email} has been deleted"}
