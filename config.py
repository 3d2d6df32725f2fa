import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    QR_SIGNING_SECRET = data.get("QR_SIGNING_SECRET", "dev-qr-secret-change-in-production")
    QR_PREFIX = data.get("QR_PREFIX", "KASETA")
    SHORT_CODE_LENGTH = int(data.get("SHORT_CODE_LENGTH", 6))
    SHORT_CODE_MAX_ATTEMPTS = int(data.get("SHORT_CODE_MAX_ATTEMPTS", 5))
    AUTHORIZE_TIMEOUT_SECONDS = float(data.get("AUTHORIZE_TIMEOUT_SECONDS", 10))
    ACCESS_LOG_PAGE_SIZE = int(data.get("ACCESS_LOG_PAGE_SIZE", 50))
