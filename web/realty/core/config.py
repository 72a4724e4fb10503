import os
from typing import List
from functools import lru_cache


class Settings:
    """Application settings read from the environment"""

    # Database
    DB_DSN: str = os.getenv("DB_DSN", "")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_ECHO: bool = os.getenv("DB_ECHO", "false").lower() == "true"

    # Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = int(os.getenv("JWT_ACCESS_TTL", "900"))  # 15 minutes
    REFRESH_TOKEN_EXPIRE_SECONDS: int = int(os.getenv("JWT_REFRESH_TTL", str(60 * 60 * 24 * 30)))  # 30 days
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    PASSWORD_RESET_EXPIRE_SECONDS: int = int(os.getenv("PASSWORD_RESET_TTL", "3600"))  # 1 hour

    # CORS
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    CORS_ALLOW_ORIGINS: List[str] = []
    CORS_ALLOW_CREDENTIALS: bool = True

    # Rate Limiting
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")

    # Business Rules
    MAX_SAVED_SEARCHES: int = int(os.getenv("MAX_SAVED_SEARCHES", "10"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def __init__(self):
        self._validate()
        self._parse_cors_origins()

    def _validate(self):
        """Validate required settings"""
        if not self.SECRET_KEY:
            raise ValueError("SECRET_KEY environment variable must be set")
        if not self.DB_DSN:
            raise ValueError("DB_DSN environment variable must be set")

    def _parse_cors_origins(self):
        """Parse CORS origins from environment"""
        raw_origins = os.getenv("CORS_ALLOW_ORIGINS") or self.FRONTEND_URL

        if raw_origins.strip() == "*":
            self.CORS_ALLOW_ORIGINS = ["*"]
            self.CORS_ALLOW_CREDENTIALS = False  # wildcard forbids credentials
        else:
            self.CORS_ALLOW_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]
            self.CORS_ALLOW_CREDENTIALS = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
