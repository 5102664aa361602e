import re
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..deps import get_current_user
from ..schemas import CamelModel
from ...config import settings
from ...database import get_db
from ...errors import ValidationError
from ...models import User

router = APIRouter()

_INTEREST = re.compile(r"^[A-Za-z0-9\s&-]+$")


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    profile_pic: Optional[str] = None


class InterestsRequest(BaseModel):
    interests: Any = None


def profile_dict(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "profilePic": user.profile_pic or "",
        "interests": user.interests or [],
        "badges": user.badges or [],
        "resumeScore": user.resume_score or 0,
    }


def clean_interests(values: list) -> list[str]:
    """Trimmed, 3-50 chars of letters/digits/space/hyphen/&, first occurrence kept."""
    cleaned = []
    for value in values:
        if not isinstance(value, str):
            continue
        value = value.strip()
        if 3 <= len(value) <= 50 and _INTEREST.match(value) and value not in cleaned:
            cleaned.append(value)
    return cleaned


@router.get("/me")
def get_logged_in_user(user: User = Depends(get_current_user)):
    return profile_dict(user)


@router.put("/update")
def update_profile(
    request: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if request.name is not None:
        if not request.name.strip():
            raise ValidationError("Name cannot be empty")
        user.name = request.name.strip()
    if request.profile_pic is not None:
        user.profile_pic = request.profile_pic.strip()
    db.commit()
    return {"message": "Profile updated successfully!", "user": profile_dict(user)}


@router.post("/interests")
def save_interests(
    request: InterestsRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not isinstance(request.interests, list):
        raise ValidationError("Interests must be an array")

    interests = clean_interests(request.interests)
    if len(interests) > settings.MAX_INTERESTS:
        raise ValidationError(f"Maximum {settings.MAX_INTERESTS} interests allowed")

    user.interests = interests
    db.commit()
    return {"message": "Interests saved successfully", "interests": interests}


@router.get("/interests")
def get_interests(user: User = Depends(get_current_user)):
    return {"interests": user.interests or []}
