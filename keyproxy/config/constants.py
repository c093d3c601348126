"""
Constants shared across KeyProxy.
"""

# Provider that ships with a working adapter and may use a shared default key
DEFAULT_PROVIDER = "openai"

# Providers known by name but without an implemented adapter
PLACEHOLDER_PROVIDERS = ("google", "anthropic")

OPENAI_CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 500

TOKEN_LIFETIME_MINUTES = 60
JWT_ALGORITHM = "HS256"

ENCRYPTION_KEY_HEX_LENGTH = 64

# Publicly known key kept only so legacy deployments can be reproduced.
LEGACY_ENCRYPTION_KEY_HEX = "0123456789abcdef" * 4

DEFAULT_PORT = 3001
DEFAULT_UPSTREAM_TIMEOUT = 60.0
