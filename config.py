# config.py
# Environment-driven settings shared by the server, the CLI client and the history store.

import os

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

# --- Model provider ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4")

# Scoring call is deterministic and short: the model only has to emit a number
SCORING_TEMPERATURE = 0
SCORING_MAX_TOKENS = 10

# --- Server ---
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))

# Response header carrying the fit score out of band of the streamed body
FIT_SCORE_HEADER = "x-fit-score"

# --- Client ---
GENERATE_URL = os.getenv("GENERATE_URL", "http://localhost:8000/api/generate")
HISTORY_PATH = os.getenv("HISTORY_PATH", "applications.json")
HISTORY_DISPLAY_LIMIT = 5

# --- Logging ---
LOG_DIR = os.getenv("LOG_DIR")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
