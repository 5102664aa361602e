import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...auth import create_access_token, hash_password, verify_password
from ...database import get_db
from ...errors import ValidationError
from ...models import User

logger = logging.getLogger(__name__)

router = APIRouter()

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


@router.post("/register", status_code=201)
def register_user(request: RegisterRequest, db: Session = Depends(get_db)):
    name = request.name.strip()
    email = request.email.strip().lower()
    if not name or not email or not request.password:
        raise ValidationError("All fields are required")
    if len(request.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    if db.query(User).filter(User.email == email).first():
        raise ValidationError("Email already registered")

    user = User(name=name, email=email, password_hash=hash_password(request.password))
    db.add(user)
    db.commit()
    logger.info("[auth] registered user %s", user.id)
    return {"message": "User registered successfully"}


@router.post("/login")
def login_user(request: LoginRequest, db: Session = Depends(get_db)):
    email = request.email.strip().lower()
    password = request.password.strip()
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        raise ValidationError("Invalid email or password")

    return {
        "message": "Login successful",
        "token": create_access_token(user.id),
        "user": {"id": user.id, "name": user.name, "email": user.email},
    }
