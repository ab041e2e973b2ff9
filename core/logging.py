# core/logging.py
# -*- coding: utf-8 -*-

import sys
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from . import config

# ------------------------------------------------
# terminal logger
# ------------------------------------------------
logger = logging.getLogger("mt_assistant")
logger.setLevel(config.LOG_LEVEL)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s", datefmt="%H:%M:%S")
    )
    logger.addHandler(handler)


# ------------------------------------------------
# per-session JSONL event log
# ------------------------------------------------

# session ids arrive from HTTP callers; keep them inside LOG_DIR
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def event_log_path(session_id: str) -> Path:
    name = _UNSAFE_CHARS.sub("_", session_id).strip("._") or "session"
    return config.LOG_DIR / f"{name}.jsonl"


def log_event(session_id: str, payload: Dict[str, Any]) -> None:
    """
    One JSON line per turn, one file per session, for after-the-fact review
    of what was extracted and decided. Off when MT_EVENT_LOG is false.
    """
    if not config.EVENT_LOG_ENABLED:
        return

    path = event_log_path(session_id)
    path.parent.mkdir(parents=True, exist_ok=True)

    record = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "session_id": session_id,
        **payload,
    }
    # enums and sets fall back to str()
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
