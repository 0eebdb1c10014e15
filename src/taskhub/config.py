"""Application settings loaded once at process start."""

from __future__ import annotations

import os

from taskhub.core.exceptions import ConfigurationError

DEV_JWT_SECRET = "dev-access-secret-change-in-prod"  # pragma: allowlist secret


class Settings:
    """Process-wide configuration.

    Built once at startup and handed to the components that need it; nothing
    in the core reads the environment on its own.
    """

    def __init__(
        self,
        *,
        environment: str = "development",
        database_url: str = "postgresql://localhost:5432/taskhub",
        jwt_secret_key: str = DEV_JWT_SECRET,
        jwt_algorithm: str = "HS256",
        access_token_expire_minutes: int = 15,
        refresh_token_expire_days: int = 7,
        bcrypt_rounds: int = 12,
        cors_origin: str = "http://localhost:5173",
    ) -> None:
        """Initialize and validate settings.

        Raises:
            ConfigurationError: If a value is out of range, or production runs
                without an explicit signing secret.
        """
        self.environment = environment
        self.database_url = database_url
        self.jwt_secret_key = jwt_secret_key
        self.jwt_algorithm = jwt_algorithm
        self.access_token_expire_minutes = access_token_expire_minutes
        self.refresh_token_expire_days = refresh_token_expire_days
        self.bcrypt_rounds = bcrypt_rounds
        self.cors_origin = cors_origin
        self._validate()

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        return cls(
            environment=os.getenv("APP_ENV", "development"),
            database_url=os.getenv("DATABASE_URL", "postgresql://localhost:5432/taskhub"),
            jwt_secret_key=os.getenv("JWT_SECRET_KEY", DEV_JWT_SECRET),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")),
            refresh_token_expire_days=int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
            cors_origin=os.getenv("CORS_ORIGIN", "http://localhost:5173"),
        )

    @property
    def is_production(self) -> bool:
        """Whether the app runs with production guarantees."""
        return self.environment.lower() == "production"

    def _validate(self) -> None:
        if not self.jwt_secret_key:
            raise ConfigurationError("JWT_SECRET_KEY must not be empty")
        if self.is_production and self.jwt_secret_key == DEV_JWT_SECRET:
            raise ConfigurationError("Missing required environment variable: JWT_SECRET_KEY")
        if self.access_token_expire_minutes <= 0:
            raise ConfigurationError("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")
        if self.refresh_token_expire_days <= 0:
            raise ConfigurationError("REFRESH_TOKEN_EXPIRE_DAYS must be positive")
        # bcrypt only accepts cost factors in this range
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ConfigurationError("BCRYPT_ROUNDS must be between 4 and 31")
