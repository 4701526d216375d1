# launcher_server/api/auth.py

from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from pydantic import BaseModel
from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from launcher_server.core import config
from launcher_server.core.accounts import register_user, authenticate_user, user_to_public
from launcher_server.core.errors import AuthError, PermissionDeniedError
from launcher_server.core.repository import SqlRepository
from launcher_server.database import get_db
from launcher_server.models.user import User


router = APIRouter(prefix="/api/auth")
bearer_scheme = HTTPBearer(auto_error=False)


class RegisterRequest(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


def get_repository(db: Session = Depends(get_db)) -> SqlRepository:
    return SqlRepository(db)


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=config.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = {"sub": user.id, "isAdmin": bool(user.is_admin), "exp": expire}
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        raise AuthError("Invalid token")
    if not payload.get("sub"):
        raise AuthError("Invalid token")
    return payload


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    repo: SqlRepository = Depends(get_repository),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthError("No token provided")

    payload = decode_access_token(credentials.credentials)
    user = repo.get_user(payload["sub"])
    if user is None:
        raise AuthError("Invalid token")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise PermissionDeniedError("Admin privileges required")
    return current_user


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(req: RegisterRequest, repo: SqlRepository = Depends(get_repository)):
    user = register_user(repo, req.username, req.email, req.password)
    return {"message": "Registration successful", "user": user_to_public(repo, user)}


@router.post("/login")
def login(req: LoginRequest, repo: SqlRepository = Depends(get_repository)):
    user = authenticate_user(repo, req.username, req.password)
    return {
        "message": "Login successful",
        "token": create_access_token(user),
        "user": user_to_public(repo, user),
    }


@router.get("/me")
def read_users_me(
    current_user: User = Depends(get_current_user),
    repo: SqlRepository = Depends(get_repository),
):
    return user_to_public(repo, current_user)
