import os

from dotenv import load_dotenv

# Load from .env if it exists (useful for local development)
load_dotenv()

LOGGING_LEVEL = os.getenv("LOGGING_LEVEL", "INFO").upper()

# Service used when a request does not name one
DEFAULT_SERVICE = "gemini"

# Local model server (Ollama)
LOCAL_LLM_URL_DEVELOPMENT = "http://localhost:11434"
LOCAL_LLM_URL_PRODUCTION_DEFAULT = "http://ollama:11434"

DEFAULT_TIMEOUT_S = 60.0

# Env var names per service, first match wins
API_KEY_ENV = {
    "openai": ("OPENAI_API_KEY", "OPENAI_KEY"),
    "claude": ("ANTHROPIC_API_KEY", "CLAUDE_API_KEY"),
    "gemini": ("GEMINI_API_KEY",),
    "groq": ("GROQ_API_KEY",),
}


def is_production() -> bool:
    env = os.getenv("APP_ENV") or os.getenv("RAILS_ENV") or ""
    return env.strip().lower() == "production"


def default_service() -> str:
    return (os.getenv("SERVICE") or DEFAULT_SERVICE).strip().lower()


def local_llm_url() -> str:
    """Base URL of the local model server.

    LOCAL_LLM_URL wins; otherwise the deployment flag picks the production or
    development endpoint.
    """
    url = (os.getenv("LOCAL_LLM_URL") or "").strip()
    if url:
        return url.rstrip("/")
    if is_production():
        return (
            os.getenv("LOCAL_LLM_URL_PRODUCTION") or LOCAL_LLM_URL_PRODUCTION_DEFAULT
        ).rstrip("/")
    return LOCAL_LLM_URL_DEVELOPMENT


def api_key(service: str) -> str:
    for name in API_KEY_ENV.get(service, ()):
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return ""


def timeout_s() -> float:
    raw = os.getenv("LLM_TIMEOUT_SEC")
    if not raw:
        return DEFAULT_TIMEOUT_S
    try:
        return max(1.0, float(raw))
    except ValueError:
        return DEFAULT_TIMEOUT_S
