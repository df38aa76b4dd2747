import os
import threading
from dotenv import load_dotenv

load_dotenv()

class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL","INFO")
        self.DATABASE_URL = os.environ.get("DATABASE_URL", None)
        # Tokens are issued by the identity provider, we only verify them
        self.JWT_SECRET = os.environ.get("JWT_SECRET", "")
        self.JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
        self.JWT_AUDIENCE = os.environ.get("JWT_AUDIENCE", None)
        self.IDENTITY_WEBHOOK_SECRET = os.environ.get("IDENTITY_WEBHOOK_SECRET", "")
        self.CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL

        user = os.environ.get("POSTGRES_USER")
        password = os.environ.get("POSTGRES_PASSWORD")
        host = os.environ.get("POSTGRES_URL")
        db = os.environ.get("POSTGRES_DB")
        return f"postgresql://{user}:{password}@{host}/{db}"

settings = BackendSettings()
