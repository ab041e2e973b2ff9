# -*- coding: utf-8 -*-
"""
main.py

Console entry point for the MT classification assistant demo.

Role summary
--------------------------------------
1. Chat mode
   - type change descriptions line by line, as in the web chat
   - uses mt_brain.mt_engine only (one local session)
   - commands: /reset, /finalize, /history, /state, exit

2. Questionnaire mode
   - answers the Figure 1 questions one by one (y/n)
   - uses mt_brain.decision_tree

The HTTP server (app_fastapi.py) exposes the same engine; this file is for
trying the rules out without a front end.
"""

import json
import uuid

from mt_brain.decision_tree import TravelerQuestionnaire, evaluate_questionnaire
from mt_brain.mt_engine import MTEngine


# =====================================================================
#  Mode 1: chat
# =====================================================================
def run_chat_mode():
    print("\n[mode 1] MT chat demo (exit to quit, /reset, /finalize, /history, /state)")
    engine = MTEngine()
    session_id = f"console-{uuid.uuid4().hex[:8]}"

    while True:
        try:
            text = input("\nyou > ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nbye.")
            break

        if text.lower() in ("exit", "quit"):
            print("bye.")
            break

        if text == "/reset":
            result = engine.reset_session(session_id)
        elif text == "/finalize":
            result = engine.finalize_scenario(session_id) if engine.get_session(session_id) else None
            if result is None:
                print("nothing to finalize yet.")
                continue
        elif text == "/history":
            session = engine.get_session(session_id)
            history = [h.to_dict() for h in session.history] if session else []
            print(json.dumps(history, ensure_ascii=False, indent=2))
            continue
        elif text == "/state":
            session = engine.get_session(session_id)
            print(json.dumps(session.debug_view() if session else {}, ensure_ascii=False, indent=2))
            continue
        else:
            result = engine.process_message(session_id, text)

        print("\n" + result.response_text)
        print(f"\n[scenario {result.scenario_number}] stage={result.stage.value}", end="")
        if result.next_question:
            print(f" | asking for: {result.next_question.value}", end="")
        print()


# =====================================================================
#  Mode 2: questionnaire
# =====================================================================
_QUESTIONS = [
    ("is_temporary", "Are all changes temporary?", False),
    ("is_physical_change", "Is the change physical?", True),
    ("is_identical_replacement", "Is the change an identical replacement?", False),
    ("is_design_outside_da", "Is the design performed outside the DA's group?", False),
    ("requires_new_procedures", "Are new or revised procedures / training / manuals required?", False),
    ("requires_multiple_documents", "Is more than one design document needed?", False),
    ("is_single_discipline", "Is the design single-discipline?", True),
    ("revisions_outside_da", "Are revisions implemented outside the DA's group?", False),
    ("requires_software_change", "Does the change also require a software change?", False),
    ("requires_hoisting_rigging", "Does the change require hoisting and/or rigging?", False),
]


def _ask_yes_no(question: str, default: bool) -> bool:
    hint = "Y/n" if default else "y/N"
    answer = input(f"{question} [{hint}] ").strip().lower()
    if not answer:
        return default
    return answer.startswith("y")


def run_questionnaire_mode():
    print("\n[mode 2] Figure 1 questionnaire")
    answers = {}
    try:
        for name, question, default in _QUESTIONS:
            answers[name] = _ask_yes_no(question, default)
        answers["proposed_solution"] = input("Proposed solution (free text): ").strip()
    except (EOFError, KeyboardInterrupt):
        print("\ncancelled.")
        return

    result = evaluate_questionnaire(TravelerQuestionnaire.from_dict(answers))
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    mode = input("mode (1 = chat, 2 = questionnaire) > ").strip()
    if mode == "2":
        run_questionnaire_mode()
    else:
        run_chat_mode()
