"""Central Configuration for NightMind."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Base Directory (Root of the project)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load Environment Variables
load_dotenv(BASE_DIR / ".env")

# LLM Settings
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GEMINI_MODEL_NAME = os.getenv("GEMINI_MODEL_NAME", "gemini-2.0-flash")

# Collaborator timeouts (seconds)
COMPLETION_TIMEOUT_SECONDS = float(os.getenv("COMPLETION_TIMEOUT_SECONDS", "20"))
ANALYSIS_TIMEOUT_SECONDS = float(os.getenv("ANALYSIS_TIMEOUT_SECONDS", "30"))

# Storage
DATA_DIR = Path(os.getenv("NIGHTMIND_DATA_DIR") or BASE_DIR / ".nightmind")
ENCRYPTION_KEY = os.getenv("NIGHTMIND_ENCRYPTION_KEY")

CONVERSATION_STORAGE_KEY = "nightmind-storage"
JOURNAL_STORAGE_KEY = "nightmind-journal"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Journal listing defaults
DEFAULT_PAGE_SIZE = 20
