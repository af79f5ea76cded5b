# =========================================================
# USER MANAGEMENT (ROLES)
#
# owner > admin > user > blocked
#
# - Roles live on the server; every request re-reads them
# - Nobody can change their own role
# - Only the owner may grant or revoke admin
# - The owner role is never granted or removed here
# =========================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_admin_user
from app.models.users import User
from app.schemas.user import RoleUpdate, UserResponse

router = APIRouter(prefix="/users", tags=["Users"])

logger = logging.getLogger("app.users")


@router.get("", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    return db.query(User).order_by(User.created_at, User.id).all()


@router.patch("/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: int,
    role_data: RoleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if user.id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role",
        )

    if user.role == "owner":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="The owner's role cannot be changed",
        )

    if (user.role == "admin" or role_data.role == "admin") and admin.role != "owner":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can grant or revoke admin",
        )

    previous_role = user.role
    user.role = role_data.role
    db.commit()
    db.refresh(user)

    logger.info(
        f"{admin.email} changed role of {user.email} from {previous_role} to {user.role}"
    )

    return user
