from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from money_manager.core.errors import InvalidOperation, NotFound, Unauthorized
from money_manager.core.logging_setup import get_logger
from money_manager.core.security import (
    create_access_token,
    get_current_user,
    get_password_hash,
    verify_password,
)
from money_manager.database import atomic, get_session
from money_manager.models.user import User
from money_manager.schemas.user import UserCreate, UserRead
from money_manager.utils.category_helpers import create_base_categories

router = APIRouter(prefix="/auth", tags=["auth"])

logger = get_logger(__name__)


# Registro
@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(user_create: UserCreate, session: Session = Depends(get_session)):
    email = user_create.email.lower()
    user_exists = session.exec(select(User).where(User.email == email)).first()
    if user_exists:
        raise InvalidOperation("Email already registered")

    with atomic(session):
        user = User(
            name=user_create.name.strip(),
            email=email,
            hashed_password=get_password_hash(user_create.password),
        )
        session.add(user)
        session.flush()
        create_base_categories(user.id, session)

    session.refresh(user)
    logger.info("user_registered", user_id=str(user.id))
    return user


# Login
@router.post("/login")
def login(form_data: OAuth2PasswordRequestForm = Depends(), session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == form_data.username.lower())).first()
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise Unauthorized("Invalid credentials")

    access_token = create_access_token(data={"sub": str(user.id)})
    return {"access_token": access_token, "token_type": "bearer"}


# Ruta protegida
@router.get("/me", response_model=UserRead)
def read_users_me(user_id: UUID = Depends(get_current_user), session: Session = Depends(get_session)):
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user
