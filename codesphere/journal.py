"""Daily journal and the JSON audit files (history and session)."""

import json
import sys
import time
from datetime import datetime

from . import config
from .config import RED, RESET
from .memory import truncate_plain


def log_interaction(role, content):
    """Appends interaction to the daily journal."""
    try:
        today = datetime.now().strftime("%Y-%m-%d")
        logfile = config.JOURNAL_DIR / f"{today}.log"
        timestamp = datetime.now().strftime("%H:%M:%S")

        with open(logfile, "a", encoding="utf-8") as f:
            f.write(f"[{timestamp}] [{role.upper()}]\n{content}\n" + "-"*40 + "\n")
    except OSError:
        # Journal problems must not disrupt the UI
        pass


def _warn(msg, exc):
    print(f"{RED}{msg}: {exc}{RESET}", file=sys.stderr)


def _new_session():
    return {
        "id": int(time.time() * 1000),
        "start": datetime.now().isoformat(),
        "prompts": [],
    }


def _load(path, default):
    if not path.exists():
        return default
    return json.loads(path.read_text(encoding="utf-8"))


def _dump(path, data):
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def init_audit_files():
    if not config.HISTORY_FILE.exists():
        _dump(config.HISTORY_FILE, [])
    if not config.SESSION_FILE.exists():
        _dump(config.SESSION_FILE, _new_session())


def add_to_history(user_input, output):
    try:
        history = _load(config.HISTORY_FILE, [])
        history.append({
            "timestamp": datetime.now().isoformat(),
            "input": user_input,
            "output": truncate_plain(str(output)),
        })
        _dump(config.HISTORY_FILE, history[-config.HISTORY_LIMIT:])
    except (OSError, ValueError, AttributeError) as e:
        _warn("Failed to update history", e)


def update_session(prompt, response):
    try:
        session = _load(config.SESSION_FILE, None) or _new_session()
        session["prompts"].append({
            "timestamp": datetime.now().isoformat(),
            "prompt": prompt,
            "response": response,
        })
        _dump(config.SESSION_FILE, session)
    except (OSError, ValueError, KeyError, TypeError) as e:
        _warn("Failed to update session", e)
