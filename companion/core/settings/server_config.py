"""HTTP server configuration."""

from pydantic import BaseModel


class ServerConfig(BaseModel, frozen=True):
    """Bind address and browser-facing settings of the API server."""

    host: str
    port: int
    cors_origins: str

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse the comma-separated origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
