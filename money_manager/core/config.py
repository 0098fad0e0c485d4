import os
from dotenv import load_dotenv

load_dotenv()  # Carga las variables de entorno


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./money_manager.db")
SQL_ECHO = _env_bool("SQL_ECHO")

SECRET_KEY = os.getenv("SECRET_KEY", "mm-secret")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

# Remote access pairing (one-time code handshake)
ACCESS_GRANT_TTL_MINUTES = int(os.getenv("ACCESS_GRANT_TTL_MINUTES", "15"))
ACCESS_GRANT_MAX_ATTEMPTS = int(os.getenv("ACCESS_GRANT_MAX_ATTEMPTS", "3"))
ACCESS_GRANT_REDIRECT = os.getenv("ACCESS_GRANT_REDIRECT", "/dashboard")

# Read-only share links
SHARE_LINK_TTL_HOURS = int(os.getenv("SHARE_LINK_TTL_HOURS", "5"))
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:8000")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
