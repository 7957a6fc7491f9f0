import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from errors import Unauthenticated

logger = logging.getLogger(__name__)

ROLES = ("patient", "doctor")


@dataclass(frozen=True)
class Claims:
    id: int
    role: str
    email: str

    def to_dict(self) -> dict:
        return {"id": self.id, "role": self.role, "email": self.email}


def _utcnow():
    return datetime.now(timezone.utc)


class TokenService:
    """Signs and checks stateless session tokens; there is no revocation."""

    def __init__(self, secret: str, ttl: timedelta = timedelta(days=7),
                 algorithm: str = "HS256", now=_utcnow):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self.secret = secret
        self.ttl = ttl
        self.algorithm = algorithm
        self.now = now

    def issue(self, subject_id: int, role: str, email: str) -> str:
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        issued = self.now()
        payload = {
            "id": subject_id, "role": role, "email": email,
            "iat": int(issued.timestamp()),
            "exp": int((issued + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Claims:
        try:
            # expiry is checked against our own clock below
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm],
                                 options={"verify_exp": False, "verify_iat": False})
        except JWTError as e:
            logger.warning("Token rejected: %s", e)
            raise Unauthenticated("Invalid/expired token")

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= self.now().timestamp():
            logger.info("Token expired or without expiry")
            raise Unauthenticated("Invalid/expired token")

        sub, role, email = payload.get("id"), payload.get("role"), payload.get("email")
        if not isinstance(sub, int) or isinstance(sub, bool) or role not in ROLES or not email:
            logger.warning("Token carries incomplete claims")
            raise Unauthenticated("Invalid/expired token")
        return Claims(id=sub, role=role, email=email)
