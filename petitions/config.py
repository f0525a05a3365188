import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "postgresql://localhost:5432/petitions"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"connect_timeout": 5},
    }

    # Counter store (near-real-time statistics)
    REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    REDIS_SOCKET_TIMEOUT = float(os.environ.get("REDIS_SOCKET_TIMEOUT", "2"))

    # Used to build the confirmation links sent by mail
    BASE_URL = os.environ.get("BASE_URL", "http://localhost:5000")

    # Reminder sweep
    SCHEDULER_ENABLED = os.environ.get("SCHEDULER_ENABLED", "true").lower() != "false"
