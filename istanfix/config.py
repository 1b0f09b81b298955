"""
Configuration for Istanfix
==========================

Environment variables:
- DATABASE_URL: SQLAlchemy URL (default: sqlite:///./istanfix.db)
- UPLOAD_DIR: Directory for uploaded report photos (default: ./uploads)
- MAX_UPLOAD_BYTES: Maximum photo size (default: 5 MB)
- GOV_VERIFICATION_CODE: Code required to sign up with the government role
- JWT_SECRET_KEY / JWT_ACCESS_TOKEN_EXPIRE_MINUTES: Access token signing
- CORS_ALLOW_ORIGINS: Comma separated list of allowed origins
- RATE_LIMIT_ENABLED / REDIS_URL: Redis-backed rate limiting for write endpoints
"""

from typing import List
from pydantic_settings import BaseSettings
from functools import lru_cache


DEFAULT_JWT_SECRET = "dev-secret-key-change-in-production"
DEFAULT_GOV_CODE = "ISTANFIX-GOV-2024"


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Database
    database_url: str = "sqlite:///./istanfix.db"
    sql_echo: bool = False
    db_connect_timeout: int = 5

    # Uploads
    upload_dir: str = "./uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Signup
    gov_verification_code: str = DEFAULT_GOV_CODE

    # JWT
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60 * 24
    bcrypt_rounds: int = 12

    # HTTP
    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:8000,http://127.0.0.1:8000"
    enforce_https: bool = False
    hsts_max_age: int = 31536000

    # Rate limiting
    rate_limit_enabled: bool = False
    redis_url: str = "redis://localhost:6379/0"
    rate_limit_per_minute: int = 30

    # Startup
    seed_on_startup: bool = True

    # Service info
    log_level: str = "INFO"
    service_version: str = "1.0.0"

    class Config:
        env_prefix = ""
        case_sensitive = False
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def cors_origins(self) -> List[str]:
        origins: List[str] = []
        for item in self.cors_allow_origins.split(","):
            origin = item.strip().strip('"').strip("'").rstrip("/")
            if origin:
                origins.append(origin)
        return origins

    def validate_security_config(self) -> List[str]:
        """Validate security-sensitive configuration, return list of warnings"""
        warnings = []

        if self.jwt_secret_key == DEFAULT_JWT_SECRET:
            warnings.append("JWT_SECRET_KEY is the development default; set it in production")

        if self.gov_verification_code == DEFAULT_GOV_CODE:
            warnings.append("GOV_VERIFICATION_CODE is the built-in default; set it in production")

        if self.rate_limit_enabled and not self.redis_url:
            warnings.append("RATE_LIMIT_ENABLED=true but REDIS_URL not set")

        return warnings


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
