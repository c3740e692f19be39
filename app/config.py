from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Database
    DATABASE_PATH: str = "devconnect.db"
    DATABASE_ECHO: bool = False

    # Auth
    AUTH_JWT_SECRET: str = "devconnect-dev-secret"
    AUTH_JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 86400
    RESET_TOKEN_EXPIRE_SECONDS: int = 3600
    PASSWORD_HASH_ROUNDS: int = 10

    # Bootstrap admin account
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@devconnect.com"
    ADMIN_PASSWORD: str = "admin123"

    # Email
    FRONTEND_URL: str = "http://localhost:3000"
    EMAIL_HOST: str = ""
    EMAIL_PORT: int = 587
    EMAIL_SECURE: bool = False
    EMAIL_USER: str = ""
    EMAIL_PASSWORD: str = ""

    # Object storage
    OSS_ACCESS_KEY_ID: str = ""
    OSS_ACCESS_KEY_SECRET: str = ""
    OSS_ENDPOINT: str = ""
    OSS_BUCKET: str = ""
    OSS_BASE_URL: str = ""
    OSS_PREFIX: str = "devconnect"
    UPLOAD_DIR: str = "static/uploads"

    # Post generation
    RAPIDAPI_KEY: str = ""
    RAPIDAPI_URL: str = "https://chatgpt-42.p.rapidapi.com/gpt4"
    RAPIDAPI_HOST: str = "chatgpt-42.p.rapidapi.com"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
