import os

from dotenv import load_dotenv

load_dotenv()

GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-pro")
GEMINI_TIMEOUT_SEC = float(os.getenv("GEMINI_TIMEOUT_SEC", "60"))
GEMINI_ERROR_MODE = os.getenv("GEMINI_ERROR_MODE", "forward").strip().lower()
if GEMINI_ERROR_MODE not in {"forward", "mask"}:
    GEMINI_ERROR_MODE = "forward"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def get_api_key() -> str:
    return os.getenv("GEMINI_API_KEY", "")
