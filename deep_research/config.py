"""Runtime configuration.

Every value is a scalar read from the environment once at import time.
Components take these as defaults and accept overrides as arguments, so
tests never need to touch the environment.
"""

import os

# Rate limiting: the completion endpoint allows ~10 calls/minute, keep one
# call of headroom and a one-second window margin.
MAX_CALLS_PER_WINDOW = int(os.getenv("MAX_CALLS_PER_MINUTE", "9"))
RATE_LIMIT_WINDOW_MS = int(os.getenv("RATE_LIMIT_WINDOW_MS", "61000"))

# Prompt trimming
CONTEXT_SIZE = int(os.getenv("CONTEXT_SIZE", "128000"))
MIN_CHUNK_SIZE = int(os.getenv("MIN_CHUNK_SIZE", "140"))

# Completion requests
REQUEST_MAX_RETRIES = int(os.getenv("REQUEST_MAX_RETRIES", "2"))
REQUEST_TIMEOUT_S = float(os.getenv("REQUEST_TIMEOUT_S", "120"))

# OpenRouter (OpenAI-compatible API)
OPENROUTER_KEY = os.getenv("OPENROUTER_KEY", "")
OPENROUTER_ENDPOINT = os.getenv("OPENROUTER_ENDPOINT", "https://openrouter.ai/api/v1")
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "o3-mini")

# Search
BRAVE_API_KEY = os.getenv("BRAVE_API_KEY", "")

# Diagnostics
DEBUG_LOG_PATH = os.getenv("DEBUG_LOG_PATH", "debug.log")
ERROR_ARTIFACT_PATH = os.getenv("ERROR_ARTIFACT_PATH", "error.json")
