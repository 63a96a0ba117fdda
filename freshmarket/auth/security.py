import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from freshmarket.core.errors import Forbidden, InvalidToken, Unauthorized, ValidationError
from freshmarket.db.session import get_db
from freshmarket.models.user import User as UserModel
from freshmarket.schemas.user import MAX_PASSWORD_BYTES, TokenData

log = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24
BCRYPT_ROUNDS = 10

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Identity decoded from a verified access token."""

    id: str
    role: str


class CredentialService:
    """Password hashing and signed access tokens."""

    def __init__(
        self,
        *,
        secret_key: str,
        algorithm: str = ALGORITHM,
        expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ):
        if not secret_key:
            raise ValueError("A token signing secret is required")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds,
            bcrypt__truncate_error=True,
        )

    @staticmethod
    def _too_long(password: str) -> bool:
        return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES

    def get_password_hash(self, password: str) -> str:
        if self._too_long(password):
            raise ValidationError(
                f"Validation error: password: must be at most {MAX_PASSWORD_BYTES} bytes", field="password"
            )
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        # no stored hash can come from a longer secret; bcrypt would compare only its prefix
        if not hashed_password or self._too_long(plain_password):
            return False
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            # malformed or unknown hash format
            log.warning("Password verification against an unreadable hash")
            return False

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        if "sub" not in to_encode and "id" in to_encode:
            to_encode["sub"] = str(to_encode["id"])
        if "sub" not in to_encode or "role" not in to_encode:
            raise ValueError("Token data must include a subject and a role")

        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=self.expire_minutes))
        to_encode.update({"iat": now, "exp": expire})
        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> dict:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise InvalidToken("Token has expired") from exc
        except JWTError as exc:
            raise InvalidToken("Could not validate credentials") from exc

        try:
            TokenData.model_validate(payload)
        except PydanticValidationError as exc:
            raise InvalidToken("Token payload is missing subject or role") from exc
        return payload


def get_credentials(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service: CredentialService = Depends(get_credentials),
) -> Principal:
    if credentials is None:
        log.warning("No bearer token provided for %s %s", request.method, request.url.path)
        raise Unauthorized("No bearer token provided")

    payload = service.decode_access_token(credentials.credentials)
    principal = Principal(id=str(payload["sub"]), role=payload["role"])
    request.state.principal = principal
    return principal


def require_admin(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> UserModel:
    # token claims are not trusted for the role; the live record decides
    user = db.get(UserModel, principal.id)
    if user is None or user.is_deleted or user.role != "admin":
        log.warning("Admin access denied for subject %s", principal.id)
        raise Forbidden("Admin access required")
    return user
