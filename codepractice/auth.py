from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from passlib.context import CryptContext
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from codepractice import storage
from codepractice.db import get_session
from codepractice.errors import Conflict, Forbidden, Unauthorized
from codepractice.models import Role, User
from codepractice.schemas import AuthResponse, LoginRequest, RegisterRequest, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

INVALID_CREDENTIALS = "Invalid credentials"


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


class AuthGate:
    """Issues and checks bearer tokens; the only writer of user records.

    The signing secret is handed in by whoever builds the app, so tests can
    run against a fixed key.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", access_token_expire_minutes: int = 60 * 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

    def create_access_token(self, user_id: int, now: Optional[datetime] = None) -> str:
        issued = now or datetime.now(timezone.utc)
        to_encode = {
            "sub": str(user_id),
            "iat": issued,
            "exp": issued + timedelta(minutes=self.access_token_expire_minutes),
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> int:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise Unauthorized("Invalid token")
        try:
            return int(payload.get("sub"))
        except (TypeError, ValueError):
            raise Unauthorized("Invalid token")

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(
            token=self.create_access_token(user.id),
            user=UserPublic.model_validate(user),
        )

    def register(self, session: Session, username: str, email: str, password: str,
                 role: Role = Role.student) -> AuthResponse:
        if storage.get_user_by_email(session, email) or storage.get_user_by_username(session, username):
            raise Conflict("User already exists")

        user = User(
            username=username,
            email=email,
            password_hash=get_password_hash(password),
            role=role,
        )
        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            # lost a race with a concurrent registration
            session.rollback()
            raise Conflict("User already exists")
        session.refresh(user)
        logger.info("Registered user %s (id=%s, role=%s)", user.username, user.id, user.role.value)
        return self._auth_response(user)

    def login(self, session: Session, email: str, password: str) -> AuthResponse:
        user = storage.get_user_by_email(session, email)
        # same error for unknown email and bad password
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed login for %s", email)
            raise Unauthorized(INVALID_CREDENTIALS)
        return self._auth_response(user)

    def verify(self, session: Session, token: Optional[str]) -> User:
        if not token:
            raise Unauthorized("Access token required")
        user_id = self.decode_token(token)
        user = storage.get_user(session, user_id)
        if user is None:
            logger.warning("Token presented for missing user id=%s", user_id)
            raise Forbidden("Invalid token")
        return user

    def require_role(self, user: User, role: Role) -> User:
        if user.role != role:
            logger.warning("User %s (role: %s) denied, %s required", user.username, user.role.value, role.value)
            raise Forbidden(f"{role.value.capitalize()} access required")
        return user


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
    gate: AuthGate = Depends(get_auth_gate),
) -> User:
    token = credentials.credentials if credentials else None
    return gate.verify(session, token)


def require_admin(
    current_user: User = Depends(get_current_user),
    gate: AuthGate = Depends(get_auth_gate),
) -> User:
    return gate.require_role(current_user, Role.admin)


@router.post("/register", response_model=AuthResponse)
def register(
    body: RegisterRequest,
    session: Session = Depends(get_session),
    gate: AuthGate = Depends(get_auth_gate),
):
    return gate.register(session, body.username, body.email, body.password)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    session: Session = Depends(get_session),
    gate: AuthGate = Depends(get_auth_gate),
):
    return gate.login(session, body.email, body.password)


@router.get("/me", response_model=UserPublic)
def me(current_user: User = Depends(get_current_user)):
    return current_user
