# FILE: gst_billing/core/config.py
import os
from typing import List
from pydantic import BaseModel
from dotenv import load_dotenv
from urllib.parse import quote_plus

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class Settings(BaseModel):
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "GST Billing")
    API_V1_STR: str = os.getenv("API_V1_STR", "/api")

    # CORS (env takes priority)
    BACKEND_CORS_ORIGINS: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ))

    # ---------- Database ----------
    MYSQL_HOST: str = os.getenv("MYSQL_HOST", "localhost")
    MYSQL_PORT: int = int(os.getenv("MYSQL_PORT", "3306"))
    MYSQL_USER: str = os.getenv("MYSQL_USER", "gst_user")
    MYSQL_PASSWORD: str = os.getenv("MYSQL_PASSWORD", "")
    MYSQL_DB: str = os.getenv("MYSQL_DB", "gst_billing")
    DB_DRIVER: str = os.getenv("DB_DRIVER", "pymysql")
    DB_ECHO: bool = _flag("DB_ECHO")
    DB_AUTO_CREATE: bool = _flag("DB_AUTO_CREATE", "true")

    # DATABASE_URL wins over the MYSQL_* parts (sqlite for local runs)
    SQLALCHEMY_DATABASE_URI: str = os.getenv(
        "DATABASE_URL",
        f"mysql+{DB_DRIVER}://{quote_plus(MYSQL_USER)}:{quote_plus(MYSQL_PASSWORD)}"
        f"@{MYSQL_HOST}:{MYSQL_PORT}/{MYSQL_DB}",
    )

    # ---------- Security ----------
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-this")
    JWT_ALG: str = os.getenv("JWT_ALG", "HS256")

    # ---------- Inventory ----------
    DEFAULT_STOCK_UNIT: str = os.getenv("DEFAULT_STOCK_UNIT", "Nos")
    STOCK_MOVEMENT_PAGE_SIZE: int = int(
        os.getenv("STOCK_MOVEMENT_PAGE_SIZE", "50"))
    STOCK_MOVEMENT_MAX_PAGE_SIZE: int = int(
        os.getenv("STOCK_MOVEMENT_MAX_PAGE_SIZE", "100"))

    # ---------- Documents ----------
    DOCUMENT_PAGE_SIZE: int = int(os.getenv("DOCUMENT_PAGE_SIZE", "100"))

    # ---------- Logging ----------
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
