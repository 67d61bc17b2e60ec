import os

from core.settings.app import AppConfig
from core.settings.db import DBConfig

TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")

__all__ = ["AppConfig", "DBConfig", "TESTING"]
