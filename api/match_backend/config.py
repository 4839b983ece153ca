import os

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg2://postgres:postgres@db:5432/match_backend")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

JWT_SECRET = os.getenv("JWT_SECRET", "")
ACCESS_TOKEN_TTL_MINUTES = int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", "60"))

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
TRAIT_MODEL = os.getenv("TRAIT_MODEL", "gpt-4")
TRAIT_TEMPERATURE = float(os.getenv("TRAIT_TEMPERATURE", "0.5"))
TRAIT_MAX_TOKENS = int(os.getenv("TRAIT_MAX_TOKENS", "500"))
TRAIT_EXTRACTION_ENABLED = os.getenv("TRAIT_EXTRACTION_ENABLED", "true").lower() == "true"

MATCH_LIMIT_DEFAULT = int(os.getenv("MATCH_LIMIT_DEFAULT", "5"))
MATCH_LIMIT_MAX = int(os.getenv("MATCH_LIMIT_MAX", "20"))
MESSAGE_MAX_LENGTH = int(os.getenv("MESSAGE_MAX_LENGTH", "2000"))

RL_LIKE_LIMIT = int(os.getenv("RL_LIKE_LIMIT", "60"))
RL_MESSAGE_LIMIT = int(os.getenv("RL_MESSAGE_LIMIT", "120"))
RL_WINDOW_SECONDS = int(os.getenv("RL_WINDOW_SECONDS", "60"))
