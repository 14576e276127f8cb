import os
import uuid
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Config:
    ROOT_DIR = Path(os.path.abspath(os.path.dirname(__file__))).parent
    SECRET_KEY = os.environ.get("SECRET_KEY")
    if not SECRET_KEY:
        SECRET_KEY = str(uuid.uuid4())
    ENV = os.environ.get("ENV", "development").lower()

    CORS_HEADERS = "Content-Type"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Requests carry their user in this header; there is no login layer
    USER_ID_HEADER = "X-User-Id"
    DEFAULT_USER_ID = os.environ.get("DEFAULT_USER_ID", "local")

    # Placement windows are local wall-clock hours in this zone unless the
    # profile names its own
    DEFAULT_TIMEZONE = os.environ.get("DEFAULT_TIMEZONE", "UTC")

    DEFAULT_SESSION_MINS = int(os.environ.get("DEFAULT_SESSION_MINS", 60))
    MIN_SESSION_MINS = 15
    MAX_SESSION_MINS = 240
    MAX_DAY_WALK_DAYS = int(os.environ.get("MAX_DAY_WALK_DAYS", 365))


class DevelopmentConfig(Config):
    ENV = "development"
    DEBUG = True

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "sqlite:///" + os.path.join(Config.ROOT_DIR, "app.db")
    )


class ProductionConfig(Config):
    ENV = "production"
    DEBUG = False

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "sqlite:///" + os.path.join(Config.ROOT_DIR, "app.db")
    )


class TestingConfig(Config):
    ENV = "testing"
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    DEFAULT_TIMEZONE = "UTC"
    MAX_DAY_WALK_DAYS = 30
