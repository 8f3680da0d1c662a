"""Connection settings for the Canvas clients."""

from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://canvas.instructure.com"
DEFAULT_CORS_PROXY_URL = "https://cors-anywhere.herokuapp.com/"


class CanvasSettings(BaseSettings):
    """Immutable configuration snapshot.

    Values come from keyword arguments, ``CANVAS_*`` environment variables or
    a ``.env`` file. Build a new client when any of them change.
    """

    model_config = SettingsConfigDict(
        env_prefix="CANVAS_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    api_url: str = DEFAULT_API_URL
    api_token: SecretStr = SecretStr("")
    use_proxy: bool = False
    cors_proxy_url: str = DEFAULT_CORS_PROXY_URL
    timeout: float | None = None

    @property
    def proxy_enabled(self) -> bool:
        return self.use_proxy and bool(self.cors_proxy_url)
