from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "examcore"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "change-me"
    TOKEN_ALGORITHM: str = "HS256"
    TESTING: bool = False

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: str = "5432"
    DATABASE_USER: Optional[str] = None
    DATABASE_PASSWORD: Optional[str] = None
    DATABASE_NAME: Optional[str] = None

    DATABASE_URL: str = "sqlite:///./examcore.db"
    TEST_DATABASE_URL: Optional[str] = None

    def __init__(self, **data):
        super().__init__(**data)
        if self.DATABASE_HOST:
            self.DATABASE_URL = (
                f'postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}'
                f'@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}'
            )

    # Scheduler
    SCHEDULER_ENABLED: bool = True
    TIMEOUT_SWEEP_INTERVAL_SECONDS: int = 5
    CERTIFICATE_EXPIRY_SWEEP_HOUR: int = 0

    # Session behaviour defaults, resolved into SessionSettings per request
    AUTO_SAVE_INTERVAL: int = 30  # seconds
    ENABLE_AUTO_SAVE: bool = True
    AUTO_SUBMIT_ON_TIMEOUT: bool = True
    ALLOW_QUESTION_NAVIGATION: bool = True
    ENABLE_QUESTION_FLAGGING: bool = True
    NETWORK_PAUSE_ENABLED: bool = True
    MAX_TOTAL_PAUSE_SECONDS: Optional[int] = None  # None = unlimited
    MANUAL_FINALIZE_GRACE_SECONDS: int = 300

    # Role hierarchy
    HIERARCHY_CACHE_TTL_SECONDS: int = 30
    HIERARCHY_MAX_DEPTH: int = 16
    SUPERVISOR_MAX_LEVEL: int = 4

    # Certificates
    CERTIFICATE_SEQUENCE_PADDING: int = 6

    class Config:
        env_file = ".env"

settings = Settings()
