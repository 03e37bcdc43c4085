from sqlalchemy.orm import Session

from database.models import User
from enums.user_role import UserRole
from schemas.auth_schema import UserCreate, UserUpdate
from utils.dependencies import hash_password


def create_user(payload: UserCreate, db: Session, role: UserRole = UserRole.USER) -> User:
    user = User(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        company_name=payload.company_name,
        hashed_password=hash_password(payload.password),
        role=UserRole(role).value,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_user_by_email(email: str, db: Session):
    return db.query(User).filter_by(email=email).first()


def get_user_by_id(user_id: int, db: Session):
    return db.query(User).filter(User.id == user_id).first()


def get_all_users(db: Session, role: UserRole = None):
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == UserRole(role).value)
    return query.order_by(User.id).all()


def update_user(user_id: int, payload: UserUpdate, db: Session):
    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        return None

    if payload.name:
        user.name = payload.name
    if payload.email:
        user.email = payload.email
    if payload.phone is not None:
        user.phone = payload.phone
    if payload.company_name is not None:
        user.company_name = payload.company_name
    if payload.role is not None:
        user.role = payload.role.value
    if payload.is_active is not None:
        user.is_active = payload.is_active
    db.commit()
    db.refresh(user)

    return user


def delete_user(user_id: int, db: Session):
    user = db.query(User).filter(User.id == user_id).first()
    if user:
        db.delete(user)
        db.commit()
    return user
