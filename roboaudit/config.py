"""Application configuration."""

from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from roboaudit.errors import ConfigurationError

SAMPLE_ENV = """DATABASE_NAME=[DB_NAME_HERE]
DATABASE_USER=[DB_USER_HERE]
DATABASE_PASS=[DB_PASS_HERE]
DATABASE_HOST=[DB_HOST_HERE]
PORT=[SERVER_PORT_NUMBER]"""

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Application settings, loaded once at startup."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True
    )

    database_name: str | None = None
    database_user: str | None = None
    database_pass: str | None = None
    database_host: str | None = None
    database_port: int = 5432
    database_url: str | None = None

    host: str = "0.0.0.0"
    port: int
    log_level: str = "INFO"

    @field_validator("database_url", mode="after")
    @classmethod
    def normalize_db_url(cls, v: str | None) -> str | None:
        """Ensure postgresql+asyncpg scheme (hosted providers give postgresql://)."""
        if v and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("port")
    @classmethod
    def check_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def require_database_credentials(self) -> "Settings":
        """Either DATABASE_URL or the full set of DATABASE_* values must be present."""
        if self.database_url:
            return self
        missing = [
            name.upper()
            for name in ("database_name", "database_user", "database_pass", "database_host")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(f"{', '.join(missing)} not defined")
        return self

    @property
    def database_url_resolved(self) -> str:
        """SQLAlchemy URL for the configured database."""
        if self.database_url:
            return self.database_url
        url = URL.create(
            "postgresql+asyncpg",
            username=self.database_user,
            password=self.database_pass,
            host=self.database_host,
            port=self.database_port,
            database=self.database_name,
        )
        return url.render_as_string(hide_password=False)


def load_settings(**overrides) -> Settings:
    """Build Settings from the environment, failing fast with a readable message."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = []
        for error in exc.errors():
            field = ".".join(str(part).upper() for part in error["loc"])
            if error["type"] == "missing":
                problems.append(f"{field} not defined")
            elif field:
                problems.append(f"{field}: {error['msg']}")
            else:
                problems.append(error["msg"].removeprefix("Value error, "))
        raise ConfigurationError("; ".join(problems)) from exc
