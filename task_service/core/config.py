# task_service/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Settings for the Task Service, loaded from the environment or a .env file
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database Settings
    DATABASE_URL: str = Field(..., description="Async SQLAlchemy database URL (postgresql+asyncpg://...)")

    # Application Settings
    ENVIRONMENT: str = Field("development", description="Environment name")
    LOG_LEVEL: str = Field("INFO", description="Log level")

    # Logging Configuration
    ENABLE_JSON_LOGGING: bool = Field(True, description="Enable JSON structured logging")

    # Identity Settings (tokens are validated upstream by the gateway)
    KEYCLOAK_CLIENT_ID: str = Field("ticketing-app", description="Client whose roles are read from the token")
    MANAGER_ROLE: str = Field("Manager", description="Client role granting manager rights")
    EMPLOYEE_ROLE: str = Field("Employee", description="Client role granting employee rights")

    # External Services
    PROJECT_SERVICE_URL: str = Field("http://localhost:8081", description="Base URL of the project service")
    USER_SERVICE_URL: str = Field("http://localhost:8082", description="Base URL of the user service")
    EXTERNAL_SERVICE_TIMEOUT: float = Field(5.0, description="Per-request timeout in seconds for external services")
    EXTERNAL_SERVICE_MAX_TRIES: int = Field(3, ge=1, description="Attempts per external call before giving up")

    # Performance Settings
    DB_POOL_SIZE: int = Field(20, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(0, description="Database max overflow connections")

    @property
    def should_use_json_logging(self) -> bool:
        """Use JSON logging in production or when explicitly enabled"""
        return self.ENVIRONMENT == "production" or self.ENABLE_JSON_LOGGING

    @property
    def uses_postgres(self) -> bool:
        return self.DATABASE_URL.startswith("postgresql")


# Create settings instance
settings = Settings()
