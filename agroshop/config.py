import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()


def _csv(value):
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./agroshop.db")
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")  # Change this in production
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "http://localhost,http://localhost:3000"))
    # monthly percentage applied to new customer accounts
    DEFAULT_INTEREST_RATE = Decimal(os.getenv("DEFAULT_INTEREST_RATE", "2.0"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
