import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

# SQLite database location, overridable for deployments and tests
DATABASE_URL = os.getenv(
    "USER_SERVICE_DATABASE_URL", f"sqlite:///{BASE_DIR / 'user_service.db'}"
)

LOG_LEVEL = os.getenv("USER_SERVICE_LOG_LEVEL", "INFO").upper()

# Starts with a letter, then 2-19 letters, digits or underscores (3-20 total).
USERNAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_]{2,19}$"

# Path prefix of the single user resource
RESOURCE_PATH = "/user"
