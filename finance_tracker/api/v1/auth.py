"""/auth - token verification and profile lookup"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import MessageResponse, UserResponse
from finance_tracker.api.dependencies import get_current_user, get_request_id
from finance_tracker.domain.models import User
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import UserRepository, record_to_user

router = APIRouter()


def _to_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, email=user.email, name=user.name, picture=user.picture)


@router.post("/verify", response_model=UserResponse)
def verify_token(
    request: Request,
    identity: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Validate the bearer token and return the stored profile.

    The profile is created on first successful verification.
    """
    request_id = get_request_id(request)

    try:
        db_user = UserRepository(db).get_or_create_user(identity)
        db.commit()
        return _to_response(record_to_user(db_user))

    except Exception as e:
        db.rollback()
        logging.error(f"User upsert error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to create user")


@router.get("/profile", response_model=UserResponse)
def get_profile(
    identity: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Stored profile of the caller; 404 until /auth/verify has been called"""
    db_user = UserRepository(db).get_user(identity.id)
    if db_user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return _to_response(record_to_user(db_user))


@router.post("/logout", response_model=MessageResponse)
def logout():
    """Sessions live with the identity provider; nothing to revoke here"""
    return MessageResponse(message="Logged out successfully")
