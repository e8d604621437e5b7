from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_TITLE: str = "Intern Hours"
    PRODUCTION_MODE: bool = False
    DAILY_REGULAR_CAP_HOURS: float = 9
    MAX_OVERTIME_HOURS: float = 3
    HOURS_PRECISION: int = 2
    LOCAL_TIMEZONE: str = "UTC"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    class Config:
        env_file = ".env"

settings = Settings()
