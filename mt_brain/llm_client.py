# -*- coding: utf-8 -*-
"""
mt_brain.llm_client

Common wrapper around the OpenAI chat API (the text-generation collaborator).

- get_client(): lazily built OpenAI client; the key comes from .env via core.config
- call_chat(messages, model, temperature, max_tokens): one chat completion
- generate_text(prompt, system=None): prompt -> text, the collaborator contract
- call_with_timeout(fn, *args, timeout=...): run any collaborator call on a
  small worker pool and give up after the configured number of seconds

Every failure (no key, network/API error, empty answer, timeout) surfaces as
CollaboratorUnavailable. Callers catch it at the turn boundary and fall back
to their local text; nothing in the classification path depends on this
module.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, List, Optional

from openai import OpenAI, OpenAIError

from core import config
from core.logging import logger

MODEL = config.CHAT_MODEL
TEMP_GLOBAL = config.TEMP_GLOBAL  # question phrasing / general answers

TextGenerator = Callable[[str], str]


class CollaboratorUnavailable(RuntimeError):
    """The text-generation collaborator failed, timed out or is not configured."""


# -------------------- client --------------------

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    global _client
    if _client is None:
        if not config.OPENAI_API_KEY:
            raise CollaboratorUnavailable("OPENAI_API_KEY is not set in .env")
        _client = OpenAI(
            api_key=config.OPENAI_API_KEY,
            timeout=config.LLM_TIMEOUT_SECONDS,
            max_retries=0,
        )
    return _client


# -------------------- worker pool / timeout --------------------

_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="mt-llm")


def call_with_timeout(
    fn: Callable[..., Any],
    *args: Any,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> Any:
    """
    Run fn(*args, **kwargs) on the worker pool and wait at most `timeout`
    seconds (default MT_LLM_TIMEOUT_SECONDS).
    A timed-out call keeps running in its worker; its answer is discarded.
    """
    limit = config.LLM_TIMEOUT_SECONDS if timeout is None else timeout
    future = _executor.submit(fn, *args, **kwargs)
    try:
        return future.result(timeout=limit)
    except FutureTimeout as e:
        future.cancel()
        raise CollaboratorUnavailable(f"collaborator timed out after {limit:.1f}s") from e


# -------------------- OpenAI chat wrapper --------------------

def call_chat(
    messages: List[Dict[str, str]],
    model: str = MODEL,
    temperature: float = TEMP_GLOBAL,
    max_tokens: int = 300,
) -> str:
    """OpenAI chat wrapper. Raises CollaboratorUnavailable instead of returning ""."""
    try:
        resp = get_client().chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except OpenAIError as e:
        logger.warning(f"[llm] OpenAI API error: {e}")
        raise CollaboratorUnavailable(str(e)) from e

    content = (resp.choices[0].message.content or "").strip()
    if not content:
        raise CollaboratorUnavailable("empty completion")
    return content


SYSTEM_PROMPT = (
    "You are an engineering assistant for facility change control. "
    "You help engineers decide whether a change needs a Modification Traveler (MT) "
    "and which design type (I-V) applies. Answer briefly and plainly. "
    "Never invent equipment, manufacturers or documentation the user did not mention."
)


def generate_text(prompt: str, system: Optional[str] = None) -> str:
    """prompt -> text. The default text generator used by the engine."""
    return call_chat(
        [
            {"role": "system", "content": system or SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
    )


def generate_bounded(
    generator: TextGenerator,
    prompt: str,
    timeout: Optional[float] = None,
) -> str:
    """
    Call any prompt -> text generator under the timeout.
    Generator exceptions of any kind are reported as CollaboratorUnavailable.
    """
    try:
        out = call_with_timeout(generator, prompt, timeout=timeout)
    except CollaboratorUnavailable:
        raise
    except Exception as e:
        raise CollaboratorUnavailable(f"{type(e).__name__}: {e}") from e

    text = (out or "").strip() if isinstance(out, str) else ""
    if not text:
        raise CollaboratorUnavailable("collaborator returned no text")
    return text
