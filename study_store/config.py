import os
from dataclasses import dataclass, field
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw_value = os.getenv(name, default)
    return tuple(part.strip() for part in raw_value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./study_store.db")
    jwt_secret: str = os.getenv("JWT_SECRET", "")
    jwt_algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    )
    otp_bytes: int = int(os.getenv("OTP_BYTES", "3"))
    otp_ttl_seconds: int = int(os.getenv("OTP_TTL_SECONDS", "604800"))
    otp_debug: bool = _env_bool("OTP_DEBUG", False)
    download_token_bytes: int = int(os.getenv("DOWNLOAD_TOKEN_BYTES", "16"))
    download_token_ttl_seconds: int = int(
        os.getenv("DOWNLOAD_TOKEN_TTL_SECONDS", "300")
    )
    credential_sweep_seconds: int = int(os.getenv("CREDENTIAL_SWEEP_SECONDS", "60"))
    tax_rate: Decimal = Decimal(os.getenv("TAX_RATE", "0.18"))
    currency_label: str = os.getenv("CURRENCY_LABEL", "Rs.")
    bills_dir: str = os.getenv("BILLS_DIR", "bills")
    files_dir: str = os.getenv("FILES_DIR", "files")
    store_name: str = os.getenv("STORE_NAME", "Study Materials Store")
    store_email: str = os.getenv("STORE_EMAIL", "contact@studymaterials.com")
    store_phone: str = os.getenv("STORE_PHONE", "+91 123-456-7890")
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@study.com").strip().lower()
    admin_password: str = os.getenv("ADMIN_PASSWORD", "admin123")
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _env_list("CORS_ORIGINS", "*")
    )
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
