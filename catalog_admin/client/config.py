from __future__ import annotations

from dataclasses import dataclass

from catalog_admin.core.config import Settings


@dataclass(frozen=True)
class ClientConfig:
    api_base_url: str = "http://localhost:8000/api"
    debounce_seconds: float = 0.3
    page_size_options: tuple[int, ...] = (5, 10, 25, 50)
    timeout_seconds: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientConfig":
        return cls(
            api_base_url=settings.CLIENT_API_BASE_URL.rstrip("/"),
            debounce_seconds=max(0, int(settings.CLIENT_DEBOUNCE_MS)) / 1000.0,
            page_size_options=tuple(settings.client_page_size_options),
            timeout_seconds=float(settings.CLIENT_TIMEOUT_SECONDS),
        )
