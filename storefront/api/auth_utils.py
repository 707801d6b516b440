from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import jwt

DEFAULT_SECRET_KEY = "dev-secret-unsafe"
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24  # 24 hours
ADMIN_ROLE = "admin"


def create_access_token(
    data: dict[str, Any],
    secret_key: str,
    expires_delta: timedelta | None = None,
    now_utc: datetime | None = None,
    algorithm: str = ALGORITHM,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode in the token
        secret_key: HMAC signing key
        expires_delta: Optional custom expiration delta
        now_utc: Current UTC time (for testing/determinism). Defaults to datetime.now(UTC).
    """
    to_encode = data.copy()
    current_time = now_utc if now_utc is not None else datetime.now(UTC)

    if expires_delta:
        expire = current_time + expires_delta
    else:
        expire = current_time + timedelta(minutes=15)

    to_encode.update({"exp": expire})
    encoded_jwt: str = jwt.encode(to_encode, secret_key, algorithm=algorithm)
    return encoded_jwt


def decode_access_token(
    token: str, secret_key: str, algorithm: str = ALGORITHM
) -> dict[str, Any] | None:
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
        return cast(dict[str, Any], payload)
    except jwt.JWTError:
        return None


@dataclass(frozen=True)
class CurrentUser:
    """The verified caller of an admin route."""

    id: str
    roles: tuple[str, ...] = ()
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles


@dataclass(frozen=True)
class AuthContext:
    """
    Token verification settings shared by every request.

    Immutable, so one instance is safely shared across worker threads.
    """

    secret_key: str
    algorithm: str = ALGORITHM

    def verify(self, token: str) -> CurrentUser | None:
        payload = decode_access_token(token, self.secret_key, self.algorithm)
        if not payload:
            return None
        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            return None
        roles = payload.get("roles") or []
        if not isinstance(roles, list):
            return None
        return CurrentUser(
            id=user_id,
            roles=tuple(r for r in roles if isinstance(r, str)),
            claims=payload,
        )

    def issue(
        self,
        user_id: str,
        roles: tuple[str, ...] = (ADMIN_ROLE,),
        expires_delta: timedelta | None = None,
    ) -> str:
        return create_access_token(
            {"sub": user_id, "roles": list(roles)},
            self.secret_key,
            expires_delta=expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
            algorithm=self.algorithm,
        )
