import os
import warnings
from dataclasses import dataclass, fields, replace

from dotenv import load_dotenv

load_dotenv()

DEV_SECRET = "INSECURE-DEV-JWT-SECRET-CHANGE-ME"  # noqa: S105


def _flag(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///clinic.sqlite3"
    jwt_secret: str = DEV_SECRET
    token_ttl_days: int = 7
    bcrypt_rounds: int = 10
    cors_origins: str = "*"
    enforce_doctor_days: bool = False
    port: int = 5050
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        secret = os.getenv("JWT_SECRET")
        if not secret:
            warnings.warn("JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
                          RuntimeWarning, stacklevel=2)
            secret = DEV_SECRET
        return cls(
            database_url = os.getenv("DATABASE_URL", cls.database_url),
            jwt_secret   = secret,
            token_ttl_days = int(os.getenv("TOKEN_TTL_DAYS", "7")),
            bcrypt_rounds  = int(os.getenv("BCRYPT_ROUNDS", "10")),
            cors_origins = os.getenv("CORS_ORIGINS", "*"),
            enforce_doctor_days = _flag(os.getenv("ENFORCE_DOCTOR_DAYS", "false")),
            port      = int(os.getenv("PORT", "5050")),
            log_level = os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def override(self, values) -> "Settings":
        """Return a copy with the known keys of ``values`` applied (case-insensitive)."""
        known = {f.name for f in fields(self)}
        changes = {}
        for key, val in dict(values).items():
            name = key.lower()
            if name not in known:
                raise KeyError(f"Unknown setting: {key}")
            if name == "enforce_doctor_days":
                val = _flag(val)
            changes[name] = val
        return replace(self, **changes)
