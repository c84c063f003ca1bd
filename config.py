import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "3000"))

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Books API")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    seed_books: bool = _env_flag("SEED_BOOKS", "True")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE")

    # CLI client
    api_timeout: float = float(os.getenv("API_TIMEOUT", "10"))

    @property
    def base_url(self) -> str:
        return f"http://{self.api_host}:{self.api_port}"


settings = Settings()
