from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "ecofreight"
    POSTGRES_USER: str = "ecofreight"
    POSTGRES_PASSWORD: str = "ecofreight"
    # Full URL wins over the POSTGRES_* parts when set
    DATABASE_URL: Optional[str] = None

    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    TOKEN_EXPIRE_MINUTES: int = 60

    # Blockchain-verification function; empty disables verification
    VERIFICATION_URL: str = ""
    VERIFICATION_API_KEY: str = ""
    VERIFICATION_TIMEOUT_SECONDS: float = 5.0
    ENABLE_VERIFICATION_STUB: bool = False

    DEFAULT_DISTANCE_KM: float = 500.0

    LOG_LEVEL: str = "INFO"
    SERVICE_VERSION: str = "1.0.0"

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
