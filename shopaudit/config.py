"""
Configuration loader.
Reads settings from .env file and makes them available to the rest of the app.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# LLM API settings — any OpenAI-compatible endpoint works, xAI by default
LLM_API_KEY = os.getenv("LLM_API_KEY") or os.getenv("XAI_API_KEY")
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://api.x.ai/v1")

# Models: text-only audits, screenshot audits, follow-up chat
AUDIT_MODEL = os.getenv("AUDIT_MODEL", "grok-3-mini-fast")
VISION_MODEL = os.getenv("VISION_MODEL", "grok-2-vision-1212")
CHAT_MODEL = os.getenv("CHAT_MODEL", "grok-3-mini-fast")

AUDIT_TEMPERATURE = float(os.getenv("AUDIT_TEMPERATURE", "0.2"))
CHAT_TEMPERATURE = float(os.getenv("CHAT_TEMPERATURE", "0.4"))

# Uploaded screenshots above this size are rejected before encoding
MAX_SCREENSHOT_BYTES = int(os.getenv("MAX_SCREENSHOT_BYTES", str(4 * 1024 * 1024)))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
