import os
import tempfile

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workforce_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

UPLOAD_ROOT = os.getenv("UPLOAD_ROOT", os.path.join(tempfile.gettempdir(), "workforce-tracker-uploads"))
MAX_CONTENT_LENGTH = 25 * 1024 * 1024
SESSION_HOURS = 4

AUTO_INIT_DB = False
AUTO_SEED_DB = False
