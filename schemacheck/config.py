import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    DIAGNOSTIC_INDENT: int = int(os.getenv("DIAGNOSTIC_INDENT", "2"))
    CHECK_META_SCHEMA: bool = os.getenv("CHECK_META_SCHEMA", "true").lower() in ("1", "true", "yes")


settings = Settings()
