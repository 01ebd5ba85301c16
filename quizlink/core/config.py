"""
환경 변수 및 설정 로드.
"""

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "QuizLink"
    APP_ENV: str = "development"  # development | production

    # PostgreSQL. 없으면 로컬 저장소만 사용 (개발/오프라인 모드)
    DATABASE_URL: str | None = None
    REMOTE_TIMEOUT_SEC: float | None = 10

    LOCAL_STORE_DIR: str = ".quizlink"
    POLL_INTERVAL_SEC: float = 5
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def remote_enabled(self) -> bool:
        return self.APP_ENV == "production" and bool(self.DATABASE_URL)


settings = Settings()
