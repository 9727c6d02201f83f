"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with SHELFSYNC_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via SHELFSYNC_* env vars."""

    # Database (single SQLite file by default)
    database_url: str = "sqlite+aiosqlite:///./data/inventory.db"

    # Inventories are created lazily with this name
    default_inventory_name: str = "Warehouse Inventory"

    # Admin surface (X-Admin-Token header)
    admin_token: str = ""

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Real-time delivery
    ws_max_pending_messages: int = 100  # per connection, excess is dropped

    model_config = {"env_prefix": "SHELFSYNC_"}

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Refuse to expose the admin surface without a token outside development."""
        if self.environment != "development" and not self.admin_token:
            raise ValueError(
                "SHELFSYNC_ADMIN_TOKEN must be set in non-development "
                "environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self


# Singleton — import this everywhere
settings = Settings()
