import os

# Comma separated list; "*" opens the API to any local frontend
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("TRANSFORM_ENGINE_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# Upper bound on a single request payload (input text or data bytes)
MAX_INPUT_MB = int(os.getenv("TRANSFORM_ENGINE_MAX_INPUT_MB", "10"))
MAX_INPUT_BYTES = MAX_INPUT_MB * 1024 * 1024

LOG_LEVEL = os.getenv("TRANSFORM_ENGINE_LOG_LEVEL", "INFO").upper()
