# forecast_app/config.py

from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Core
    APP_TITLE: str = "Time Series Prediction App"
    UI_PREFIX: str = "/"

    # 학습 백엔드 (업로드/프리뷰/학습 API)
    API_DIR: str = Field(default="http://localhost:5000")
    API_BASE: str = Field(default="/api")
    API_TIMEOUT: float = 30.0
    API_TRAIN_TIMEOUT: float = 600.0  # 학습은 동기 응답이라 길게

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    @property
    def api_root(self) -> str:
        base = (self.API_BASE or "").strip().rstrip("/")
        if base and not base.startswith("/"):
            base = "/" + base
        return f"{self.API_DIR.rstrip('/')}{base}"

settings = Settings()
