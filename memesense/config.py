"""Configuration for the MemeSense backend."""
import os

# Remote classifier (Hugging Face Gradio Space)
SPACE_ID = os.getenv("MEMESENSE_SPACE_ID", "daneigh/MSX-Backend")
SPACE_URL = os.getenv("MEMESENSE_SPACE_URL", "")
API_PREFIX = os.getenv("MEMESENSE_API_PREFIX", "/gradio_api")
ENDPOINT = os.getenv("MEMESENSE_ENDPOINT", "/classify_meme")

# Timeouts (seconds)
CLASSIFY_TIMEOUT_SECONDS = float(os.getenv("CLASSIFY_TIMEOUT_SECONDS", "60"))
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

# Notification auto-dismiss intervals (milliseconds)
SERVICE_ERROR_AUTO_CLOSE_MS = int(os.getenv("SERVICE_ERROR_AUTO_CLOSE_MS", "3000"))
TRANSPORT_ERROR_AUTO_CLOSE_MS = int(os.getenv("TRANSPORT_ERROR_AUTO_CLOSE_MS", "2000"))

# Use the offline classifier instead of the Space
USE_MOCK_CLASSIFIER = os.getenv("USE_MOCK_CLASSIFIER", "false").lower() == "true"

# Sessions
SESSION_MAX_AGE_HOURS = int(os.getenv("SESSION_MAX_AGE_HOURS", "24"))

# API settings
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))


def space_url_from_id(space_id: str) -> str:
    """Map a Space id like ``owner/name`` to its ``*.hf.space`` host."""
    subdomain = space_id.strip().lower().replace("/", "-").replace("_", "-").replace(".", "-")
    return f"https://{subdomain}.hf.space"


def get_client_config() -> dict:
    """Get remote classifier configuration as a dictionary.

    Returns:
        Dict with space_url, api_prefix, endpoint, http_timeout.
    """
    return {
        "space_url": SPACE_URL or space_url_from_id(SPACE_ID),
        "api_prefix": API_PREFIX,
        "endpoint": ENDPOINT,
        "http_timeout": HTTP_TIMEOUT_SECONDS,
    }
