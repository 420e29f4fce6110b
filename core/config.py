from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./dental_lab.db"

    # Access and refresh tokens are signed with different secrets
    JWT_SECRET: str
    JWT_REFRESH_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "dental-lab-api"
    JWT_AUDIENCE: str = "dental-lab-app"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 10

    REVOKE_REFRESH_ON_ROTATION: bool = False
    REVOKE_SESSIONS_ON_PASSWORD_CHANGE: bool = False
    DEFAULT_ROLES: list[str] = ["USER", "ADMIN"]

    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "no-reply@dental-lab.local"
    MAIL_SERVER: str = ""
    MAIL_PORT: int = 587
    FRONTEND_URL: str = "http://localhost:3001"

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3001"]

    RATE_LIMIT_ENABLED: bool = True
    DEFAULT_RATE_LIMIT: str = "100/15minutes"
    AUTH_RATE_LIMIT: str = "5/15minutes"

    @field_validator("JWT_SECRET", "JWT_REFRESH_SECRET")
    @classmethod
    def validate_secret(cls, value):
        if len(value) < 16:
            raise ValueError("JWT secrets must be at least 16 characters")
        return value

    @property
    def is_development(self) -> bool:
        return self.ENV == "development"


settings = Settings()
