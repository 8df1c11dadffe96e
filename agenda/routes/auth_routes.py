import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agenda.auth import jwt_handler
from agenda.auth.dependencies import get_current_session
from agenda.auth.passwords import hash_password, verify_password
from agenda.auth.session import SessionContext
from agenda.core import config
from agenda.core.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationFailedError
from agenda.database import get_db
from agenda.models.user import User

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_DETAIL = 'Invalid credentials.'


class SignupRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


def normalize_email(value: str | None) -> str:
    return (value or '').strip().lower()


def issue_token(user: User) -> AuthResponse:
    token = jwt_handler.create_access_token(subject=user.email, user_id=user.id, role=user.role)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post('/signup', response_model=AuthResponse)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    name = (data.name or '').strip()
    email = normalize_email(data.email)
    if not name or not email or not data.password:
        raise ValidationFailedError('Name, email and password are required.')

    if db.query(User).filter(User.email == email).first() is not None:
        raise ConflictError('A user with this email already exists.')

    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(data.password),
        role=config.DEFAULT_USER_ROLE,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError('A user with this email already exists.') from exc
    db.refresh(user)

    logger.info('Registered user %s', user.id)
    return issue_token(user)


@router.post('/login', response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    email = normalize_email(data.email)
    if not email or not data.password:
        raise ValidationFailedError('Email and password are required.')

    user = db.query(User).filter(User.email == email).first()
    if user is None or not verify_password(data.password, user.hashed_password):
        logger.info('Rejected login attempt')
        raise UnauthorizedError(INVALID_CREDENTIALS_DETAIL)

    return issue_token(user)


@router.get('/me', response_model=UserResponse)
def me(
    session: SessionContext = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == session.user_id).first()
    if user is None:
        raise NotFoundError('User not found.')
    return user
