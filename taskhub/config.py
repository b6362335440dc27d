import os

SECRET_KEY = os.environ.get("SECRET_KEY", "CHANGE_ME_DEV_SECRET_KEY")
ALGORITHM = os.environ.get("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = float(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# Default to local SQLite for dev/tests; override via env in Docker/Prod
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./taskhub.db")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.environ.get("LOG_FILE", "")

CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

# 0 disables the background sweep; POST /tasks/check-overdue still works
OVERDUE_SWEEP_INTERVAL_SECONDS = float(os.environ.get("OVERDUE_SWEEP_INTERVAL_SECONDS", 0))
