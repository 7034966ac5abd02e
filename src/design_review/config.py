import os

from dotenv import load_dotenv

# Load from .env if it exists (useful for local development)
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


LOGGING_LEVEL = os.getenv("LOGGING_LEVEL", "INFO").upper() or "INFO"

# --- LLM provider ---
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "groq")
LLM_MODEL = os.getenv("LLM_MODEL", "llama-3.3-70b-versatile")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1200"))
LLM_TIMEOUT_S = float(os.getenv("LLM_TIMEOUT_S", "60"))

GROQ_BASE_URL = "https://api.groq.com/openai/v1"

# --- Pipeline ---
PIPELINE_TIMEOUT_S = float(os.getenv("PIPELINE_TIMEOUT_S", "60"))
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "2"))  # additional attempts
RETRY_BASE_DELAY_S = float(os.getenv("RETRY_BASE_DELAY_S", "1.0"))
RETRY_MAX_DELAY_S = float(os.getenv("RETRY_MAX_DELAY_S", "8.0"))
CORRECTIVE_REPROMPT = _env_bool("CORRECTIVE_REPROMPT", False)

DEFAULT_ARTIFACT_NAME = "no-file"
DEFAULT_ARTIFACT_KIND = "unknown"

# --- HTTP ---
MAX_UPLOAD_BYTES = 8 * 1024 * 1024
PORT = int(os.getenv("PORT", "5000"))
CORS_ALLOW_ORIGINS = ["*"]
