# -*- coding: utf-8 -*-
"""
mt_brain.turn_router

Decides whether a new message continues the current scenario or opens a
new one. Several changes can come up in one conversation:

- scenario 1: "we need to replace the pump from westinghouse with abb"
- scenario 2: "we also have a valve on the service water line..."
- back to 1 is not supported; a finished scenario lives in the history.

Main entry
----------
- route_turn(current, signals, standalone=None) -> RouteDecision
    reset / not, with the trigger that fired.

Triggers, checked in order
--------------------------
1) empty current context                 -> never a reset
2) "clear scenarios" / "start over"      -> clear (history is dropped too)
3) "new scenario" / "we also have" / ... -> reset
4) a different plant system              -> reset
5) a different equipment type, with the current equipment not mentioned
   and no carryover language ("the same one", "on it")  -> reset
6) the message on its own is a complete scenario that contradicts the
   current one                           -> reset
   (replaying the same complete message is not a contradiction, so replay
    stays in the same scenario)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .extractor import Signal, SignalKind, signals_of
from .schema import ScenarioAttributes, TRACKED_FIELDS


@dataclass(frozen=True)
class RouteDecision:
    reset: bool
    trigger: str = ""
    clear_history: bool = False

    def __bool__(self) -> bool:
        return self.reset


CONTINUE = RouteDecision(reset=False)


def _values(signals: Iterable[Signal], kind: SignalKind) -> List[str]:
    return [s.value for s in signals_of(signals, kind)]


def conflicting_fields(current: ScenarioAttributes, other: ScenarioAttributes) -> List[str]:
    """Tracked fields known on both sides with different values."""
    out: List[str] = []
    for name in TRACKED_FIELDS:
        a = getattr(current, name)
        b = getattr(other, name)
        if a is not None and b is not None and a != b:
            out.append(name)
    return out


def route_turn(
    current: ScenarioAttributes,
    signals: List[Signal],
    standalone: Optional[ScenarioAttributes] = None,
) -> RouteDecision:
    """
    current   : attributes of the open scenario
    signals   : signals of the new message
    standalone: the new message read on its own, passed only when it is a
                complete scenario by itself
    """
    # 1) nothing to leave
    if current.is_empty():
        return CONTINUE

    scenario_cmds = _values(signals, SignalKind.SCENARIO_MARKER)

    # 2) clear
    if "clear" in scenario_cmds:
        return RouteDecision(reset=True, trigger="clear", clear_history=True)

    # 3) explicit new scenario
    if "new" in scenario_cmds:
        return RouteDecision(reset=True, trigger="new_scenario")

    # 4) system change
    systems = _values(signals, SignalKind.SYSTEM_MARKER)
    if current.system and systems and current.system not in systems:
        return RouteDecision(reset=True, trigger="system_changed")

    # 5) equipment change
    equipment = _values(signals, SignalKind.EQUIPMENT_TYPE)
    carryover = bool(signals_of(signals, SignalKind.CARRYOVER_MARKER))
    if (
        current.equipment_type
        and equipment
        and current.equipment_type not in equipment
        and not carryover
    ):
        return RouteDecision(reset=True, trigger="equipment_changed")

    # 6) a second complete scenario
    if standalone is not None and conflicting_fields(current, standalone):
        return RouteDecision(reset=True, trigger="conflicting_scenario")

    return CONTINUE


def is_resettable(
    current: ScenarioAttributes,
    signals: List[Signal],
    standalone: Optional[ScenarioAttributes] = None,
) -> bool:
    return route_turn(current, signals, standalone).reset
