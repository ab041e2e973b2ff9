"""Shared fixtures for the MT assistant test suite.

No test talks to OpenAI: the engine fixtures inject a MagicMock generator,
and the JSONL event log is redirected to a tmp directory.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core import config
from mt_brain.mt_engine import MTEngine
from mt_brain.schema import SafetyClass, ScenarioAttributes


# =============================================================================
# ENVIRONMENT
# =============================================================================

@pytest.fixture(autouse=True)
def event_log_dir(tmp_path, monkeypatch):
    """Every test writes its JSONL event log under tmp_path."""
    log_dir = tmp_path / "logs"
    monkeypatch.setattr(config, "LOG_DIR", log_dir)
    monkeypatch.setattr(config, "EVENT_LOG_ENABLED", True)
    return log_dir


# =============================================================================
# COLLABORATOR FIXTURES
# =============================================================================

@pytest.fixture
def fake_generator():
    """prompt -> text stand-in for the OpenAI collaborator."""
    return MagicMock(return_value="Tell me which equipment you are changing.")


@pytest.fixture
def failing_generator():
    return MagicMock(side_effect=RuntimeError("service down"))


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def engine(fake_generator):
    """Engine with local question wording and a fake collaborator."""
    return MTEngine(generate_text=fake_generator, phrase_questions=False, timeout=1.0)


@pytest.fixture
def phrasing_engine(fake_generator):
    """Engine that asks the collaborator to word follow-up questions."""
    return MTEngine(generate_text=fake_generator, phrase_questions=True, timeout=1.0)


@pytest.fixture
def failing_engine(failing_generator):
    return MTEngine(generate_text=failing_generator, phrase_questions=True, timeout=1.0)


# =============================================================================
# ATTRIBUTE FIXTURES
# =============================================================================

@pytest.fixture
def empty_attrs():
    return ScenarioAttributes()


@pytest.fixture
def fisher_identical():
    """Fisher valve replaced by a Fisher valve with the same specifications."""
    return ScenarioAttributes(
        equipment_type="valve",
        original_manufacturer="fisher",
        replacement_manufacturer="fisher",
        specifications_claimed_equal=True,
        action="replace",
    )


@pytest.fixture
def westinghouse_to_abb():
    """Pump moving from Westinghouse to ABB, no equivalency documentation."""
    return ScenarioAttributes(
        equipment_type="pump",
        original_manufacturer="westinghouse",
        replacement_manufacturer="abb",
        has_equivalency_docs=False,
        action="replace",
    )


@pytest.fixture
def safety_class_pump(westinghouse_to_abb):
    westinghouse_to_abb.safety_marker = SafetyClass.SC
    return westinghouse_to_abb
