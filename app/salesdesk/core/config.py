from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "SalesDesk"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    DATABASE_URL: str = "sqlite+pysqlite:///./salesdesk.db"
    SUPERADMIN_NAME: str = "Super Admin"
    SUPERADMIN_EMAIL: str = "superadmin@example.com"
    SUPERADMIN_PASSWORD: str = "change-me"
    ATTACHMENTS_STORAGE_PATH: str = "./uploads"
    ATTACHMENTS_URL_PREFIX: str = "/uploads"
    ATTACHMENT_MAX_BYTES: int = 5 * 1024 * 1024
    ATTACHMENT_ALLOWED_EXTENSIONS: list[str] = ["jpg", "jpeg", "png", "pdf"]
    DASHBOARD_RECENT_LIMIT: int = 10
    REPORTS_MAX_DATE_RANGE_DAYS: int = 92
    REPORTS_MAX_ROWS: int = 100
    METRICS_ENABLED: bool = True

settings = Settings()
