import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic_crm.db")

# Firebase Configuration (staff identity provider)
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# OpenAI Configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
CHAT_TEMPERATURE = float(os.getenv("CHAT_TEMPERATURE", "0.6"))
EMAIL_DRAFT_TEMPERATURE = float(os.getenv("EMAIL_DRAFT_TEMPERATURE", "0.7"))
# Each chat message is truncated to this many characters before forwarding
CHAT_MAX_MESSAGE_CHARS = int(os.getenv("CHAT_MAX_MESSAGE_CHARS", "8000"))

# Crisalix 3D imaging partner
CRISALIX_API_BASE_URL = os.getenv("CRISALIX_API_BASE_URL", "https://api3d-staging.crisalix.com")
CRISALIX_TOKEN_COOKIE = os.getenv("CRISALIX_TOKEN_COOKIE", "crisalix_tokens")

CLINIC_NAME = os.getenv("CLINIC_NAME", "Maison Tóā Clinic")

# Frontend base URL used for CORS defaults
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Rate limiting for the AI endpoints
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
AI_RATE_LIMIT = int(os.getenv("AI_RATE_LIMIT", "30"))
AI_RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("AI_RATE_LIMIT_WINDOW_SECONDS", "60"))
