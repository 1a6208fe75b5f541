from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "StoreCare"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite+pysqlite:///./storecare.db"
    SUPERADMIN_EMAIL: str = "superadmin@example.com"
    SUPERADMIN_FULL_NAME: str = "Super Admin"
    SUPERADMIN_PASSWORD: str = "change-me"
    PASSWORD_MIN_LENGTH: int = 8
    POPULAR_CATEGORIES_LIMIT: int = 8
    FEATURED_PRODUCTS_LIMIT: int = 12
    ASSIGNMENT_MAX_RETRIES: int = 3
    METRICS_ENABLED: bool = True

settings = Settings()
