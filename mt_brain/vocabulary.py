# -*- coding: utf-8 -*-
"""
mt_brain.vocabulary

Closed vocabularies the extractor matches against.

Every table maps a surface phrase (lower case, words separated by single
spaces) to a canonical value. The extractor never hard-codes a phrase;
adding a manufacturer or an equipment noun means adding one line here.

Tables
------
- EQUIPMENT_TERMS      : equipment nouns -> equipment type
- MANUFACTURER_TERMS   : vendor tokens -> canonical vendor name
- SAFETY_TERMS         : safety-significance phrases -> SC / SS / GS
- IDENTITY_TERMS       : "same manufacturer", "different manufacturer", ...
- DURATION_TERMS       : temporary / permanent
- ACTION_TERMS         : replace / modify / install / upgrade
- CAPABILITY_TERMS     : digital, software, programmable logic, new design
- SPECIFICATION_TERMS  : specs claimed equal / different
- DOCUMENTATION_TERMS  : equivalency documentation present / absent
- RESTORATION_TERMS    : restoration-plan language for temporary changes
- SYSTEM_TERMS         : plant system keywords
- SCENARIO_TERMS       : clear / new scenario / finish commands
- CARRYOVER_TERMS      : language that points back at the current equipment
- ANSWER_TERMS         : bare yes / no answers
- ORIGINAL_CUES, REPLACEMENT_CUES, WEAK_ORIGINAL_CUES : words that give a
  manufacturer its role
"""

from __future__ import annotations

from typing import Dict

# ------------------------------------------------------------
# 1. Equipment
# ------------------------------------------------------------

EQUIPMENT_TERMS: Dict[str, str] = {
    "pump": "pump",
    "pumps": "pump",
    "centrifugal pump": "pump",
    "reactor coolant pump": "pump",
    "rcp": "pump",
    "motor": "motor",
    "motors": "motor",
    "pump motor": "motor",
    "fan motor": "motor",
    "valve": "valve",
    "valves": "valve",
    "check valve": "valve",
    "isolation valve": "valve",
    "relief valve": "valve",
    "safety relief valve": "valve",
    "control valve": "valve",
    "flow control valve": "valve",
    "motor operated valve": "valve",
    "mov": "valve",
    "air operated valve": "valve",
    "aov": "valve",
    "actuator": "actuator",
    "valve actuator": "actuator",
    "transmitter": "transmitter",
    "pressure transmitter": "transmitter",
    "level transmitter": "transmitter",
    "flow transmitter": "transmitter",
    "sensor": "sensor",
    "temperature element": "sensor",
    "thermocouple": "sensor",
    "rtd": "sensor",
    "breaker": "breaker",
    "circuit breaker": "breaker",
    "relay": "relay",
    "protective relay": "relay",
    "generator": "generator",
    "diesel generator": "generator",
    "transformer": "transformer",
    "heat exchanger": "heat exchanger",
    "fan": "fan",
    "compressor": "compressor",
    "cable": "cable",
    "cables": "cable",
    "inverter": "inverter",
    "battery": "battery",
    "battery charger": "battery charger",
    "radiation monitor": "radiation monitor",
    "controller": "controller",
    "piping": "piping",
    "pipe": "piping",
    "tank": "tank",
    "hvac unit": "hvac unit",
    "chiller": "chiller",
}

# ------------------------------------------------------------
# 2. Manufacturers
# ------------------------------------------------------------

MANUFACTURER_TERMS: Dict[str, str] = {
    "westinghouse": "westinghouse",
    "abb": "abb",
    "fisher": "fisher",
    "emerson": "emerson",
    "rosemount": "rosemount",
    "siemens": "siemens",
    "general electric": "general electric",
    "ge": "general electric",
    "goulds": "goulds",
    "grundfos": "grundfos",
    "flowserve": "flowserve",
    "crane": "crane",
    "velan": "velan",
    "limitorque": "limitorque",
    "rotork": "rotork",
    "masoneilan": "masoneilan",
    "yokogawa": "yokogawa",
    "honeywell": "honeywell",
    "foxboro": "foxboro",
    "schneider": "schneider electric",
    "schneider electric": "schneider electric",
    "square d": "schneider electric",
    "eaton": "eaton",
    "cutler hammer": "eaton",
    "allen bradley": "rockwell",
    "rockwell": "rockwell",
    "baldor": "baldor",
    "reliance": "reliance",
    "weg": "weg",
    "toshiba": "toshiba",
    "sulzer": "sulzer",
    "byron jackson": "flowserve",
    "ametek": "ametek",
    "cummins": "cummins",
    "caterpillar": "caterpillar",
    "fairbanks morse": "fairbanks morse",
}

# ------------------------------------------------------------
# 3. Safety significance
# ------------------------------------------------------------

# SC = Safety Class, SS = Safety Significant, GS = General Service
SAFETY_TERMS: Dict[str, str] = {
    "safety class": "SC",
    "safety-class": "SC",
    "sc equipment": "SC",
    "safety related": "SC",
    "class 1e": "SC",
    "reactor protection": "SC",
    "reactor protection system": "SC",
    "rps": "SC",
    "emergency core cooling": "SC",
    "emergency core cooling system": "SC",
    "eccs": "SC",
    "containment isolation": "SC",
    "emergency shutdown": "SC",
    "engineered safety features": "SC",
    "safety significant": "SS",
    "ss equipment": "SS",
    "safety system": "SS",
    "emergency power": "SS",
    "emergency diesel": "SS",
    "fire protection": "SS",
    "general service": "GS",
    "gs equipment": "GS",
    "non safety": "GS",
    "non safety related": "GS",
    "not safety related": "GS",
    "not safety class": "GS",
    "not safety significant": "GS",
    "balance of plant": "GS",
}

# ------------------------------------------------------------
# 4. Replacement identity
# ------------------------------------------------------------

IDENTITY_TERMS: Dict[str, str] = {
    "same manufacturer": "same_manufacturer",
    "same vendor": "same_manufacturer",
    "same brand": "same_manufacturer",
    "same make": "same_manufacturer",
    "same part number": "same_part_number",
    "same part": "same_part_number",
    "same model": "same_model",
    "same model number": "same_model",
    "exact same": "identical",
    "identical": "identical",
    "identical replacement": "identical",
    "like for like": "identical",
    "like-for-like": "identical",
    "direct replacement": "identical",
    "different manufacturer": "different_manufacturer",
    "different vendor": "different_manufacturer",
    "different brand": "different_manufacturer",
    "another manufacturer": "different_manufacturer",
    "different model": "different_model",
    "different part number": "different_model",
}

# markers that count as "identity asserted"
SAME_IDENTITY_VALUES = ("same_manufacturer", "same_part_number", "same_model", "identical")
DIFFERENT_IDENTITY_VALUES = ("different_manufacturer", "different_model")

# ------------------------------------------------------------
# 5. Duration / restoration
# ------------------------------------------------------------

DURATION_TERMS: Dict[str, str] = {
    "temporary": "temporary",
    "temporarily": "temporary",
    "temp": "temporary",
    "short term": "temporary",
    "interim": "temporary",
    "permanent": "permanent",
    "permanently": "permanent",
    "long term": "permanent",
}

# "6 weeks", "three months", "90 days"
DURATION_PERIOD_PATTERN = (
    r"(?<![A-Za-z0-9])"
    r"(\d+|one|two|three|four|five|six|seven|eight|nine|ten|twelve)"
    r"\s*(hours?|days?|weeks?|months?|outages?|cycles?)"
    r"(?![A-Za-z0-9])"
)

RESTORATION_TERMS: Dict[str, str] = {
    "restore": "restoration",
    "restored": "restoration",
    "restoration": "restoration",
    "restoration plan": "restoration",
    "put back": "restoration",
    "reinstall the original": "restoration",
    "until the permanent": "restoration",
    "until the original": "restoration",
    "planned removal": "restoration",
    "will be removed": "restoration",
    "removed after": "restoration",
    "swap back": "restoration",
}

# ------------------------------------------------------------
# 6. Actions / new capability
# ------------------------------------------------------------

ACTION_TERMS: Dict[str, str] = {
    "replace": "replace",
    "replaced": "replace",
    "replacing": "replace",
    "replacement": "replace",
    "swap": "replace",
    "swap out": "replace",
    "modify": "modify",
    "modifying": "modify",
    "modification": "modify",
    "change": "modify",
    "reroute": "modify",
    "rerouting": "modify",
    "install": "install",
    "installing": "install",
    "installation": "install",
    "add": "install",
    "upgrade": "upgrade",
    "upgrading": "upgrade",
    "retrofit": "upgrade",
}

# actions that do not imply a replacement-identity question
MODIFICATION_ACTIONS = ("modify", "install", "upgrade")

CAPABILITY_TERMS: Dict[str, str] = {
    "digital": "digital",
    "digital upgrade": "digital",
    "digital controller": "digital",
    "smart valve": "digital",
    "smart transmitter": "digital",
    "software": "software",
    "firmware": "software",
    "software change": "software",
    "programmable logic controller": "programmable_logic",
    "programmable logic": "programmable_logic",
    "plc": "programmable_logic",
    "dcs": "programmable_logic",
    "distributed control system": "programmable_logic",
    "fpga": "programmable_logic",
    "new design": "new_design",
    "new system": "new_design",
    "new installation": "new_design",
    "install new": "new_design",
    "new equipment": "new_design",
    "new capability": "new_design",
}

# ------------------------------------------------------------
# 7. Specifications / documentation
# ------------------------------------------------------------

SPECIFICATION_TERMS: Dict[str, str] = {
    "same specifications": "equal",
    "same specs": "equal",
    "same spec": "equal",
    "same rating": "equal",
    "same ratings": "equal",
    "same flow": "equal",
    "same flow rate": "equal",
    "same head": "equal",
    "same pressure": "equal",
    "same horsepower": "equal",
    "same voltage": "equal",
    "identical specifications": "equal",
    "meets the same": "equal",
    "form fit and function": "equal",
    "form, fit and function": "equal",
    "different specifications": "different",
    "different specs": "different",
    "different rating": "different",
    "higher rating": "different",
    "lower rating": "different",
    "higher horsepower": "different",
    "different voltage": "different",
    "not the same specifications": "different",
}

DOCUMENTATION_TERMS: Dict[str, str] = {
    "equivalency documentation": "present",
    "equivalency docs": "present",
    "equivalency analysis": "present",
    "equivalency evaluation": "present",
    "vendor equivalency": "present",
    "certificate of conformance": "present",
    "commercial grade dedication": "present",
    "we have documentation": "present",
    "have the documentation": "present",
    "we have the equivalency": "present",
    "no equivalency": "absent",
    "no equivalency documentation": "absent",
    "no equivalency docs": "absent",
    "no documentation": "absent",
    "no docs": "absent",
    "without documentation": "absent",
    "don't have documentation": "absent",
    "do not have documentation": "absent",
    "don't have equivalency": "absent",
    "do not have equivalency": "absent",
    "don't have the documentation": "absent",
}

# ------------------------------------------------------------
# 8. Systems / scenario control
# ------------------------------------------------------------

SYSTEM_TERMS: Dict[str, str] = {
    "spent fuel": "spent fuel pool",
    "spent fuel pool": "spent fuel pool",
    "service water": "service water",
    "component cooling water": "component cooling water",
    "component cooling": "component cooling water",
    "reactor vessel": "reactor vessel",
    "monitoring system": "monitoring system",
    "instrumentation system": "instrumentation system",
    "emergency response": "emergency response",
    "feedwater": "feedwater",
    "main steam": "main steam",
    "chemical and volume control": "chemical and volume control",
    "cvcs": "chemical and volume control",
    "residual heat removal": "residual heat removal",
    "rhr": "residual heat removal",
    "hvac system": "hvac",
    "electrical distribution": "electrical distribution",
}

SCENARIO_TERMS: Dict[str, str] = {
    "clear scenarios": "clear",
    "reset scenarios": "clear",
    "clear context": "clear",
    "start over": "clear",
    "new scenario": "new",
    "next scenario": "new",
    "another scenario": "new",
    "different scenario": "new",
    "we also have": "new",
    "also need": "new",
    "another project": "new",
    "next project": "new",
    "our third project": "new",
    "major project": "new",
    "coming up": "new",
    "that's all for this one": "finish",
    "that is all for this one": "finish",
    "finalize": "finish",
    "finalise": "finish",
    "we're done": "finish",
    "we are done": "finish",
}

CARRYOVER_TERMS: Dict[str, str] = {
    "same one": "carryover",
    "that one": "carryover",
    "this one": "carryover",
    "the same unit": "carryover",
    "same equipment": "carryover",
    "on it": "carryover",
    "for it": "carryover",
}

ANSWER_TERMS: Dict[str, str] = {
    "yes": "yes",
    "yeah": "yes",
    "yep": "yes",
    "correct": "yes",
    "we do": "yes",
    "no": "no",
    "nope": "no",
    "we don't": "no",
    "we do not": "no",
}

# ------------------------------------------------------------
# 9. Manufacturer role cues
# ------------------------------------------------------------

# single words in front of a vendor name; the closest one decides.
# "replace X with Y": the object of replace is the original.
ORIGINAL_CUES = (
    "existing", "original", "current", "currently", "old", "installed",
    "replace", "replacing", "swap", "swapping",
)
REPLACEMENT_CUES = ("with", "to", "replacement", "new", "into", "using")

# "from" alone says little: "the new one will be from ABB" names the replacement.
# When it is the closest cue, the clause in front of it decides; no other cue
# there means original ("the current one is from Westinghouse").
WEAK_ORIGINAL_CUES = ("from",)
# replacement cues that still count in the clause behind a weak cue;
# "to" is left out ("we want to move from Westinghouse")
WEAK_CUE_REPLACEMENT_CUES = ("with", "new", "replacement", "substitute", "using")

# single words right after a vendor name ("ABB replacement", "Westinghouse original")
ORIGINAL_AFTER_CUES = ("original", "existing", "currently")
REPLACEMENT_AFTER_CUES = ("replacement", "substitute")

# how many words before / after a vendor name are scanned for cues
ROLE_CUE_WORDS_BEFORE = 4
ROLE_CUE_WORDS_AFTER = 2

# phrases that point back at a replacement named earlier
REPLACEMENT_REFERENCES = ("the replacement", "the new one", "the new unit", "the substitute")

# ------------------------------------------------------------
# 10. Negation
# ------------------------------------------------------------

# a negation word within NEGATION_WORDS_BEFORE words in front of a marker
# (same clause) flips its polarity ("we don't have equivalency documentation",
# "the new one isn't from the same manufacturer")
NEGATION_WORDS = (
    "no", "not", "don't", "dont", "doesn't", "didn't", "isn't", "isnt",
    "aren't", "wasn't", "won't", "never", "without", "lack", "lacking", "missing",
)
NEGATION_WORDS_BEFORE = 4

# conjunctions end a clause as punctuation does
CLAUSE_BREAK_WORDS = ("and", "but", "so", "because", "although", "while", "whereas")

NEGATED_VALUES = {
    ("documentation_marker", "present"): "absent",
    ("specification_marker", "equal"): "different",
    ("identity_marker", "same_manufacturer"): "different_manufacturer",
    ("identity_marker", "same_model"): "different_model",
    ("identity_marker", "same_part_number"): "different_model",
    ("identity_marker", "identical"): "different_model",
    ("duration_marker", "temporary"): "permanent",
    ("duration_marker", "permanent"): "temporary",
    ("safety_marker", "SC"): "GS",
    ("safety_marker", "SS"): "GS",
    ("restoration_marker", "restoration"): "none",
}
