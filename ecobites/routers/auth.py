# ecobites/routers/auth.py
import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pymongo.errors import DuplicateKeyError

from ecobites.core.config import settings
from ecobites.core.security import (
    create_token,
    get_current_user,
    hash_password,
    token_claims,
    verify_password,
)
from ecobites.deps import get_repo
from ecobites.schemas import SigninIn, SigninOut, SignupIn, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

MAX_PICTURE_BYTES = 1_000_000
PICTURE_TYPES = {"image/jpeg": ".jpg", "image/jpg": ".jpg", "image/png": ".png"}


def public_user(doc: dict) -> UserOut:
    return UserOut.model_validate({k: v for k, v in doc.items() if k != "password"})


async def save_picture(upload: UploadFile) -> str:
    ext = PICTURE_TYPES.get((upload.content_type or "").lower())
    if not ext:
        raise HTTPException(400, "Images only (jpeg, jpg, png)")
    data = await upload.read()
    if len(data) > MAX_PICTURE_BYTES:
        raise HTTPException(400, "Profile picture must be 1MB or smaller")
    folder = Path(settings.uploads_dir)
    folder.mkdir(parents=True, exist_ok=True)
    name = f"{uuid.uuid4().hex}{ext}"
    (folder / name).write_bytes(data)
    return f"/uploads/{name}"


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(body: SignupIn, repo=Depends(get_repo)):
    try:
        user = await repo.create_user({
            "username": body.username,
            "email": body.email,
            "password": hash_password(body.password),
            "location": body.location.model_dump() if body.location else None,
            "profile_picture": None,
        })
    except DuplicateKeyError:
        raise HTTPException(409, "This email is already in use. Please use a different email.")
    logger.info("User %s signed up", user["id"])
    return {"success": True, "message": "User created successfully"}


@router.post("/signin", response_model=SigninOut)
async def signin(body: SigninIn, repo=Depends(get_repo)):
    user = await repo.find_user_by_email(body.email)
    if not user:
        raise HTTPException(404, "User not found")
    if not verify_password(body.password, user.get("password", "")):
        raise HTTPException(401, "Wrong credentials")
    token = create_token(token_claims(user))
    return {"token": token, "user": public_user(user)}


@router.put("/update")
async def update_user(
    old_password: str = Form(...),
    username: Optional[str] = Form(None),
    new_password: Optional[str] = Form(None),
    profile_picture: Optional[UploadFile] = File(None),
    user=Depends(get_current_user),
    repo=Depends(get_repo),
):
    if not verify_password(old_password, user.get("password", "")):
        raise HTTPException(401, "Old password is incorrect")

    updates = {}
    if username:
        updates["username"] = username
    if new_password:
        updates["password"] = hash_password(new_password)
    if profile_picture is not None and profile_picture.filename:
        updates["profile_picture"] = await save_picture(profile_picture)

    updated = await repo.update_user(user["id"], updates) if updates else user
    if not updated:
        raise HTTPException(404, "User not found")
    logger.info("User %s updated fields %s", user["id"], sorted(updates))
    return {"success": True, "user": public_user(updated)}


@router.get("/user", response_model=UserOut)
async def current_user(user=Depends(get_current_user)):
    return public_user(user)
