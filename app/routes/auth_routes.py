import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from database.models.user_model import User
from enums.user_role import UserRole
from schemas.auth_schema import (
    LoginRequest,
    PasswordUpdate,
    StaffCreate,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from services.auth_service import (
    create_user,
    delete_user,
    get_all_users,
    get_user_by_email,
    get_user_by_id,
    update_user,
)
from utils.dependencies import (
    admin_required,
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)
from responses.success import data_response
from responses.error import (
    conflict_error,
    forbidden_error,
    internal_server_error,
    not_found_error,
    unauthorized_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _token_payload(user: User) -> dict:
    return {
        "access_token": create_access_token({"sub": user.email}),
        "token_type": "bearer",
        "user": UserResponse.model_validate(user),
    }


@router.post("/signup")
def signup(payload: UserCreate, db: Session = Depends(get_db)):
    existing = get_user_by_email(payload.email, db)
    if existing:
        return conflict_error("User already exists")

    try:
        user = create_user(payload, db)
        return data_response(_token_payload(user))
    except Exception as e:
        logger.exception("Signup failed")
        return internal_server_error(f"Failed to register user: {str(e)}")


@router.post("/signin")
def signin(credentials: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = get_user_by_email(credentials.email, db)
        if not user or not verify_password(credentials.password, user.hashed_password):
            return unauthorized_error("Invalid credentials")
        if not user.is_active:
            return forbidden_error("Account is disabled")

        return data_response(_token_payload(user))
    except Exception as e:
        logger.exception("Signin failed")
        return internal_server_error(str(e))


@router.get("/me")
def get_me(current_user=Depends(get_current_user)):
    """Route for any authenticated user to get their own information"""
    return data_response(UserResponse.model_validate(current_user))


@router.patch("/password")
def update_password(
    payload: PasswordUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Route for any authenticated user to update their own password"""
    try:
        if not verify_password(payload.current_password, current_user.hashed_password):
            return unauthorized_error("Current password is incorrect")

        current_user.hashed_password = hash_password(payload.new_password)
        db.commit()

        return data_response({"message": "Password updated successfully"})
    except Exception as e:
        logger.exception("Password update failed")
        return internal_server_error(str(e))


@router.post("/staff")
def create_staff(
    payload: StaffCreate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    """Route for admins to create admin, manager and support accounts"""
    if get_user_by_email(payload.email, db):
        return conflict_error("User already exists")
    try:
        user = create_user(payload, db, role=payload.role)
        return data_response(UserResponse.model_validate(user))
    except Exception as e:
        logger.exception("Staff creation failed")
        return internal_server_error(f"Failed to create user: {str(e)}")


@router.get("/users")
def list_users(
    role: Optional[UserRole] = None,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        users = get_all_users(db, role)
        return data_response([UserResponse.model_validate(user) for user in users])
    except Exception as e:
        logger.exception("Listing users failed")
        return internal_server_error(f"Failed to retrieve users: {str(e)}")


@router.patch("/users/{user_id}")
def update_user_by_id(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    """Route for admins to edit accounts, change roles and disable users"""
    try:
        if payload.email:
            existing = get_user_by_email(payload.email, db)
            if existing and existing.id != user_id:
                return conflict_error("Email already in use")
        user = update_user(user_id, payload, db)
        if not user:
            return not_found_error(f"No user found with id {user_id}")
        return data_response(UserResponse.model_validate(user))
    except Exception as e:
        logger.exception("User update failed")
        return internal_server_error(f"Failed to update user: {str(e)}")


@router.delete("/users/{user_id}")
def delete_user_by_id(
    user_id: int, db: Session = Depends(get_db), current_user=Depends(admin_required)
):
    try:
        if user_id == current_user.id:
            return forbidden_error("You cannot delete your own account")
        user = get_user_by_id(user_id, db)
        if not user:
            return not_found_error(f"No user found with id {user_id}")
        if user.bookings:
            return conflict_error("Users with bookings cannot be deleted; disable the account instead")
        delete_user(user_id, db)
        return data_response({"message": f"User with id {user_id} deleted successfully"})
    except Exception as e:
        logger.exception("User deletion failed")
        return internal_server_error(f"Failed to delete user: {str(e)}")
