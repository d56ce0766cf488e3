import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass
class Settings:
    """Runtime configuration, read from the environment (and a .env file)."""

    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./prompt_library.db"))
    jwt_secret: str = field(default_factory=lambda: os.getenv("JWT_SECRET", "change-this-secret"))
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = field(default_factory=lambda: int(os.getenv("JWT_EXPIRE_DAYS", "7")))
    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "*")))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def database_label(self) -> str:
        """Database URL with credentials stripped, safe to log."""
        url = self.database_url
        return url.split("@")[-1] if "@" in url else url
