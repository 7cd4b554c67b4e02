"""
Provider model names, API versions and driver defaults.

Model names are per tier (large / mini). Azure values are deployment names,
not model ids.
"""

# OpenAI (Responses API)
OPENAI_LARGE_MODEL = "gpt-5"
OPENAI_MINI_MODEL = "gpt-5-mini"

# Azure OpenAI
AZURE_OPENAI_LARGE_DEPLOYMENT = "gpt-4.1"
AZURE_OPENAI_MINI_DEPLOYMENT = "gpt-4.1-mini"
AZURE_OPENAI_API_VERSION = "2025-03-01-preview"

# Google Gemini
GEMINI_LARGE_MODEL = "gemini-3-pro-preview"
GEMINI_MINI_MODEL = "gemini-3-flash-preview"

# Embeddings
EMBEDDING_LARGE_MODEL = "text-embedding-3-large"
EMBEDDING_MINI_MODEL = "text-embedding-3-small"
AZURE_EMBEDDING_API_VERSION = "2024-02-01"

# Environment variables
OPENAI_API_KEY_ENV = "OPENAI_API_KEY"
AZURE_OPENAI_API_KEY_ENV = "AZURE_OPENAI_API_KEY"
AZURE_OPENAI_ENDPOINT_ENV = "AZURE_OPENAI_ENDPOINT"
GOOGLE_GEMINI_API_KEY_ENV = "GOOGLE_GEMINI_API_KEY"

# Retry schedule: delay = INITIAL_RETRY_DELAY * 2**attempt, capped
MAX_RETRIES = 5
INITIAL_RETRY_DELAY = 1.0
MAX_RETRY_DELAY = 60.0
# SDK clients make a single attempt; RetryManager owns every retry
SDK_MAX_RETRIES = 0

# Tool calling
DEFAULT_MAX_TOOL_ROUNDS = 10
MAX_TOOL_CALLS_PER_RESPONSE = 10

# Name sent with json_schema output constraints
CONSTRAINED_OUTPUT_NAME = "constrainedOutput"

INTERRUPTION_MESSAGE = "\n\nSorry, it looks like the response was interrupted. Please try again."
