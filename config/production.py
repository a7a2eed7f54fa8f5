import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "practicum_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SERVER_TIMEZONE = os.getenv("SERVER_TIMEZONE", "Asia/Manila")

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")

IDEMPOTENCY_WINDOW_SECONDS = int(os.getenv("IDEMPOTENCY_WINDOW_SECONDS", "5"))
OVERTIME_MAX_HOURS = float(os.getenv("OVERTIME_MAX_HOURS", "2.0"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
