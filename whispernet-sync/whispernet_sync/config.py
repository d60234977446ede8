"""
Configuration settings for the WhisperNet sync core
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "WhisperNet Sync"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Remote API
    API_BASE_URL: str = "https://talklowkey.com/api"
    MEDIA_BASE_URL: str = "https://talklowkey.com/"
    HTTP_TIMEOUT: float = 10.0
    HTTP_CONNECT_TIMEOUT: float = 5.0

    # Public reverse geocoding (fallback)
    NOMINATIM_URL: str = "https://nominatim.openstreetmap.org"
    NOMINATIM_USER_AGENT: str = "WhisperNet-App"  # Required by Nominatim usage policy
    NOMINATIM_ZOOM: int = 10

    # Transient handoff of a just-created post
    HANDOFF_BACKEND: str = "memory"  # "memory" or "redis"
    HANDOFF_KEY: str = "tempNewPost"
    HANDOFF_TTL: int = 600  # 10 minutes in seconds

    # Redis (only used by the redis handoff backend)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 2
    REDIS_PASSWORD: str = ""

    # Location resolution
    LOCATION_CACHE_SIZE: int = 0  # 0 disables the coordinate cache
    DEFAULT_LATITUDE: float = 0.0
    DEFAULT_LONGITUDE: float = 0.0

    # Refresh behavior
    DEDUPE_CONCURRENT_REFRESH: bool = False

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
