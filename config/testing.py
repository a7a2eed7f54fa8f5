import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "practicum_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SERVER_TIMEZONE = ""

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "/tmp/practicum_uploads")

IDEMPOTENCY_WINDOW_SECONDS = 5
OVERTIME_MAX_HOURS = 2.0

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
