# core/config.py
# -*- coding: utf-8 -*-

import os
from pathlib import Path

from dotenv import load_dotenv

# load .env first, before anything reads the environment
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# --------------------------------
# Paths / log directory
# --------------------------------

# project root
BASE_DIR = Path(__file__).resolve().parent.parent

# per-session JSONL event logs
LOG_DIR = Path(os.getenv("MT_LOG_DIR", str(BASE_DIR / "data" / "logs")))

# off -> terminal logger only
EVENT_LOG_ENABLED = _env_bool("MT_EVENT_LOG", "true")

# terminal logger level (DEBUG / INFO / WARNING ...)
LOG_LEVEL = os.getenv("MT_LOG_LEVEL", "INFO").strip().upper()

# --------------------------------
# Text-generation collaborator (OpenAI)
# --------------------------------

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

CHAT_MODEL = os.getenv("MT_CHAT_MODEL", "gpt-4o-mini")
TEMP_GLOBAL = float(os.getenv("MT_LLM_TEMPERATURE", "0.2"))

# upper bound for one collaborator call, in seconds.
# past this the local fallback text is used instead.
LLM_TIMEOUT_SECONDS = float(os.getenv("MT_LLM_TIMEOUT_SECONDS", "5.0"))

# when on, follow-up questions are also phrased by the collaborator
LLM_PHRASING_ENABLED = _env_bool("MT_LLM_PHRASING", "false")

# --------------------------------
# Conversation context
# --------------------------------

# how many earlier messages are consulted for name refinement
# ("the replacement" -> a manufacturer named a couple of turns ago)
PRIOR_MESSAGE_WINDOW = int(os.getenv("MT_PRIOR_WINDOW", "5"))
