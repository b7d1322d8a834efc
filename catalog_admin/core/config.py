from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "catalog-admin"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    DATABASE_URL: str = "sqlite+pysqlite:///./catalog.db"
    DATABASE_ECHO: bool = False

    MAX_IMAGE_MB: int = 5
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Admin client (list views, URL state, debounce)
    CLIENT_API_BASE_URL: str = "http://localhost:8000/api"
    CLIENT_DEBOUNCE_MS: int = 300
    CLIENT_PAGE_SIZE_OPTIONS: str = "5,10,25,50"
    CLIENT_TIMEOUT_SECONDS: float = 10.0

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def max_image_bytes(self) -> int:
        return max(1, int(self.MAX_IMAGE_MB)) * 1024 * 1024

    @property
    def client_page_size_options(self) -> List[int]:
        sizes = []
        for raw in self.CLIENT_PAGE_SIZE_OPTIONS.split(","):
            raw = raw.strip()
            if raw.isdigit() and int(raw) > 0:
                sizes.append(int(raw))
        return sorted(set(sizes)) or [self.DEFAULT_PAGE_SIZE]

settings = Settings()
