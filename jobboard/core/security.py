"""Security utilities: password hashing, roles and the JWT token service."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional

import bcrypt
from jose import JWTError, jwt

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


class Role(str, Enum):
    """User roles."""

    JOBSEEKER = "jobseeker"
    RECRUITER = "recruiter"
    ADMIN = "admin"


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    hashed = bcrypt.hashpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored bcrypt hash."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES],
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Stored hash is not a valid bcrypt hash
        return False


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpired(TokenError):
    pass


class TokenMalformed(TokenError):
    pass


class WrongAudience(TokenError):
    pass


class WrongIssuer(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims carried by an access token."""

    subject: str
    role: Role
    is_admin: bool
    name: Optional[dict]
    issued_at: int
    expires_at: int


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class TokenService:
    """
    Issues and verifies signed, expiring bearer tokens.

    Verification is a pure function of (token, secret, now): expiry, audience
    and issuer are checked here against the injected clock rather than by the
    JWT library, so tests can pin time.
    """

    def __init__(
        self,
        secret: str,
        issuer: str,
        audience: str,
        lifetime: timedelta = timedelta(hours=24),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = utcnow,
    ):
        if not secret:
            raise ValueError("Token signing secret is not configured")
        self._secret = secret
        self.issuer = issuer
        self.audience = audience
        self.lifetime = lifetime
        self.algorithm = algorithm
        self._clock = clock

    @classmethod
    def from_settings(cls, settings) -> "TokenService":
        return cls(
            secret=settings.SECRET_KEY,
            issuer=settings.TOKEN_ISSUER,
            audience=settings.TOKEN_AUDIENCE,
            lifetime=timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
            algorithm=settings.ALGORITHM,
        )

    def issue(self, identity: Mapping[str, Any], now: Optional[datetime] = None) -> str:
        """Create a signed token for a user document."""
        issued_at = _timestamp(now or self._clock())
        role = identity["role"]
        role = role.value if isinstance(role, Role) else str(role)
        claims = {
            "sub": str(identity["_id"]),
            "role": role,
            "is_admin": role == Role.ADMIN.value,
            "name": identity.get("name"),
            "iss": self.issuer,
            "aud": self.audience,
            "iat": issued_at,
            "exp": issued_at + int(self.lifetime.total_seconds()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, now: Optional[datetime] = None) -> TokenClaims:
        """
        Verify a token and return its claims.

        Raises:
            TokenMalformed: bad signature, bad structure or missing claims
            WrongIssuer: issuer claim differs from the configured issuer
            WrongAudience: audience claim differs from the configured audience
            TokenExpired: the current time is past the expiry claim
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_aud": False,
                    "verify_iss": False,
                },
            )
        except JWTError as e:
            raise TokenMalformed(str(e)) from e

        try:
            subject = str(payload["sub"])
            role = Role(payload["role"])
            issued_at = int(payload["iat"])
            expires_at = int(payload["exp"])
        except (KeyError, TypeError, ValueError) as e:
            raise TokenMalformed(f"Invalid token claims: {e}") from e

        if payload.get("iss") != self.issuer:
            raise WrongIssuer("Token issuer is not accepted")

        audience = payload.get("aud")
        audiences = audience if isinstance(audience, list) else [audience]
        if self.audience not in audiences:
            raise WrongAudience("Token audience is not accepted")

        if _timestamp(now or self._clock()) > expires_at:
            raise TokenExpired("Token has expired")

        return TokenClaims(
            subject=subject,
            role=role,
            is_admin=role == Role.ADMIN,
            name=payload.get("name"),
            issued_at=issued_at,
            expires_at=expires_at,
        )
