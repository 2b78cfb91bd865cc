"""
Runtime configuration for SwiftLink.

Values come from the environment (and a local .env file, if present).
"""

import os
from dotenv import load_dotenv

load_dotenv()

# --- Gemini ---
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
ANNOTATION_TIMEOUT = float(os.getenv("ANNOTATION_TIMEOUT", 15))

# --- Storage ---
SWIFTLINK_DATA_PATH = os.getenv("SWIFTLINK_DATA_PATH", os.path.join("data", "swiftlink.json"))
# Browsers cap localStorage at roughly 5 MB per origin; 0 disables the cap
SWIFTLINK_STORAGE_QUOTA = int(os.getenv("SWIFTLINK_STORAGE_QUOTA", 5 * 1024 * 1024))

# --- Short links ---
SHORT_CODE_LENGTH = int(os.getenv("SHORT_CODE_LENGTH", 6))
PUBLIC_ORIGIN = os.getenv("PUBLIC_ORIGIN", "").rstrip("/")

PORT = int(os.getenv("PORT", 8080))
