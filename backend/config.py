import os
from dotenv import load_dotenv

load_dotenv()

SYSTEM_MESSAGE = (
    "You are a professional chef assistant. Generate a unique recipe for each request. "
    "Provide detailed step-by-step instructions and ensure the recipe is clear, creative, and complete."
)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Settings read from the environment (and .env) when the app is created."""

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///savorai.db")
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False
        self.MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "5"))
        self.MAX_CONTENT_LENGTH = self.MAX_UPLOAD_MB * 1024 * 1024
        self.UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
        self.CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")
        self.PORT = int(os.getenv("PORT", "8080"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # AI provider
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
        self.OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1/chat/completions")
        self.OPENAI_IMAGE_URL = os.getenv("OPENAI_IMAGE_URL", "https://api.openai.com/v1/images/generations")
        self.OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4")
        self.OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "1.0"))
        self.OPENAI_TOP_P = float(os.getenv("OPENAI_TOP_P", "0.9"))
        self.OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", "2000"))
        self.OPENAI_TIMEOUT = int(os.getenv("OPENAI_TIMEOUT", "20"))
        self.OPENAI_IMAGE_SIZE = os.getenv("OPENAI_IMAGE_SIZE", "256x256")
        self.OPENAI_SYSTEM_MESSAGE = os.getenv("OPENAI_SYSTEM_MESSAGE", SYSTEM_MESSAGE)
        self.GENERATE_IMAGES = _flag("GENERATE_IMAGES", "true")

    def as_dict(self) -> dict:
        return {k: v for k, v in vars(self).items() if k.isupper()}
