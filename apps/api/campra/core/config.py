"""Application configuration with environment variables."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"
    VERSION: str = "13.4.0"

    # Public URL of this instance (used for links sent to external services)
    URL: str = "http://localhost:3000"

    # Database
    DATABASE_URL: str
    AUTO_MIGRATE: bool = False

    # HTTP server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Clustering (master spawns this many workers; 0 = one per CPU)
    CLUSTER_LIMIT: int = 0
    DISABLE_CLUSTERING: bool = False
    WORKER_READY_TIMEOUT: float = 60.0

    # Job queue
    WORKER_POLL_INTERVAL: float = 5.0
    WORKER_BATCH_SIZE: int = 10

    # Outbound HTTP
    RELEASE_URL: str = "https://re.campra.app/meta/release.json"
    HTTP_TIMEOUT_SECONDS: float = 10.0
    HTTP_MAX_ATTEMPTS: int = 3
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_RELEASE: str = "60/minute"

    # Content moderation
    IFFY_DEFAULT_API_URL: str = "https://api.iffy.com/api/v1/ingest"

    # Drive storage
    LOCAL_STORAGE_DIR: str = "files"
    SIGNED_URL_EXPIRES_SECONDS: int = 3600

    # Logging & error tracking
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: str = ""

    @property
    def cluster_size(self) -> int:
        """Number of worker processes the master should spawn, at most one per CPU."""
        cpus = os.cpu_count() or 1
        if self.CLUSTER_LIMIT > 0:
            return min(self.CLUSTER_LIMIT, cpus)
        return cpus

    @property
    def is_dev(self) -> bool:
        return self.ENV == "dev"


settings = Settings()
