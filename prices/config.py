import os
from dataclasses import dataclass, field
from urllib.parse import quote
from dotenv import load_dotenv

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prices.db.base import Database

load_dotenv()


@dataclass(frozen=True, slots=True, kw_only=True)
class DatabaseConfig:
    """Connection settings for the price store."""

    backend: str = "postgresql"
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = field(default="postgres", repr=False)
    dbname: str = "prices"
    sslmode: str = "disable"
    min_connections: int = 1
    max_connections: int = 10

    @property
    def dsn(self) -> str:
        return (
            f"postgresql://{quote(self.user, safe='')}:{quote(self.password, safe='')}"
            f"@{self.host}:{self.port}/{self.dbname}?sslmode={self.sslmode}"
        )


class Settings:
    """Application settings loaded from environment variables."""

    _db: "Database | None" = None

    def __init__(self):
        self.version: str = os.getenv("VERSION", "0.1.0")
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "8080"))
        self.debug: bool = os.getenv("DEBUG", "false").lower() == "true"
        self.redirect_url: str = os.getenv("REDIRECT_URL", "/docs")

        # Database configuration
        self.db = DatabaseConfig(
            backend=os.getenv("DB_BACKEND", "postgresql"),
            host=os.getenv("PG_HOST", "localhost"),
            port=int(os.getenv("PG_PORT", "5432")),
            user=os.getenv("PG_USER", "postgres"),
            password=os.getenv("PG_PASSWORD", "postgres"),
            dbname=os.getenv("PG_DBNAME", "prices"),
            sslmode=os.getenv("PG_SSLMODE", "disable"),
            min_connections=int(os.getenv("DB_MIN_CONNECTIONS", "1")),
            max_connections=int(os.getenv("DB_MAX_CONNECTIONS", "10")),
        )

    def get_db(self) -> "Database":
        """
        Get the database instance based on the configured settings.

        This method initializes the singleton database connection
        if it hasn't been done yet, and returns the instance.

        Returns:
            An instance of the Database subclass for the configured backend.

        """
        from prices.db.base import Database

        if self._db is None:
            self._db = Database.from_config(self.db)

        return self._db


settings = Settings()
