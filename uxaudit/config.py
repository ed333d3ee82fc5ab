# config.py
import os

# ---------- gemini ----------
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_TIMEOUT = float(os.getenv("GEMINI_TIMEOUT", 60))

# ---------- history storage ----------
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "redis")  # "redis"|"memory"
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
HISTORY_KEY = os.getenv("HISTORY_KEY", "audit_history")

# ---------- audit flow ----------
CACHE_HIT_DELAY = float(os.getenv("CACHE_HIT_DELAY", 0.6))  # seconds, 0 disables
AUDIT_PAGE_CONTEXT = os.getenv("AUDIT_PAGE_CONTEXT", "0") not in ("0", "false", "no", "")

ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "changeme_admin_token")  # protect admin endpoints
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
