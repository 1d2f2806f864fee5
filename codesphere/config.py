import os
from pathlib import Path

VERSION = "1.0.0"

# ================= CONFIG =================
# Allow env var overrides, fallback to defaults
API_URL = os.getenv("CODESPHERE_API_URL", "https://codestral.mistral.ai/v1/chat/completions")
API_KEY = os.getenv("CODESPHERE_API_KEY")
MODEL = os.getenv("CODESPHERE_MODEL", "codestral-latest")
TEMPERATURE = float(os.getenv("CODESPHERE_TEMP", "0.2"))
MAX_TOKENS = int(os.getenv("CODESPHERE_MAX_TOKENS", "2048"))
TIMEOUT = float(os.getenv("CODESPHERE_TIMEOUT", "30"))
RENDER = os.getenv("CODESPHERE_RENDER", "true").lower() == "true"

BASE_DIR = Path(os.getenv("CODESPHERE_HOME", Path.home() / ".codesphere"))
JOURNAL_DIR = BASE_DIR / "journal"
HISTORY_FILE = BASE_DIR / "history.json"
SESSION_FILE = BASE_DIR / "session.json"
READLINE_FILE = BASE_DIR / "readline.txt"

HISTORY_LIMIT = 100

# ================= COLORS =================
RESET="\033[0m"; BOLD="\033[1m"; DIM="\033[2m"
RED="\033[31m"; GREEN="\033[32m"; YELLOW="\033[33m"
BLUE="\033[34m"; MAGENTA="\033[35m"; CYAN="\033[36m"; GRAY="\033[90m"


def init_dirs():
    BASE_DIR.mkdir(parents=True, exist_ok=True)
    JOURNAL_DIR.mkdir(exist_ok=True)


def api_enabled():
    return bool(API_KEY)
