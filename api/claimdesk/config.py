import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./claimdesk.db")
SECRET_KEY = os.getenv("SECRET_KEY", "devsecret")
TOKEN_MAX_AGE = int(os.getenv("TOKEN_MAX_AGE", "86400"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "readable")
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
DEFAULT_CONFIG_PATH = os.getenv("DEFAULT_CONFIG_PATH", "app-config.json")
MAX_FILE_FIELD_BYTES = int(os.getenv("MAX_FILE_FIELD_BYTES", str(10 * 1024 * 1024)))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
