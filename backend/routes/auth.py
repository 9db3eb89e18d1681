# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db, commit
from models import users as models
from schemas import user as schemas
from utils.audit import write_log, client_ip
from utils.errors import AuthorizationError
from utils.hashing import get_password_hash, verify_password
from utils.permissions import UserRole
from utils.tokenJWT import create_access_token, get_current_user

router = APIRouter(tags=["Auth"])

# Sign up; the account stays locked until an administrator authorizes it
@router.post("/register", response_model=schemas.UserResponse, status_code=201)
def register(user: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    normalized_email = user.email.strip().lower()

    db_user = db.query(models.User).filter(func.lower(models.User.email) == normalized_email).first()
    if db_user:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": normalized_email, "reason": "Email exists"})
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = models.User(
        email=normalized_email,
        password_hash=get_password_hash(user.password),
        role=UserRole.STOREKEEPER.value,
        display_name=user.display_name,
        is_authorized=False,
    )
    db.add(new_user)
    commit(db)
    db.refresh(new_user)

    write_log(db, user_id=new_user.id, action="REGISTER", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": new_user.email})
    return new_user


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    db_user = db.query(models.User).filter(models.User.email == email).first()

    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not db_user.is_authorized:
        write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": email, "reason": "Not authorized"})
        raise AuthorizationError("Account awaiting administrator approval")

    access_token = create_access_token(data={"sub": db_user.email, "role": db_user.role})

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})
    return {"access_token": access_token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user
