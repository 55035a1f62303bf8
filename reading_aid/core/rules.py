"""Default rule dictionaries and custom rule-table loading.

WHY: Simplification and spelling correction are driven entirely by small
fixed dictionaries. Keeping them as plain data, separate from the
engine, lets a deployment ship larger tables without touching logic.

HOW: SIMPLIFICATIONS and MISSPELLINGS are ordered dicts (declaration
order is rule order). load_rule_tables() reads a JSON file, validates it
against RULE_TABLE_SCHEMA with jsonschema, and falls back to the defaults
for any section the file leaves out.

RULES:
- SIMPLIFICATIONS order matters: later rules may rewrite earlier output
- MISSPELLINGS keys are lowercase; suggestion order is priority order
- Every misspelling entry has at least one suggestion
- A rule file may provide either section or both
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Union

import jsonschema

from reading_aid.core.errors import RuleTableError

logger = logging.getLogger(__name__)

RuleSet = Dict[str, str]
"""Ordered mapping of complex word/pattern → replacement."""

MisspellingTable = Dict[str, List[str]]
"""Mapping of lowercase misspelling → ranked suggestions."""

# ---------------------------------------------------------------------------
# Default tables
# ---------------------------------------------------------------------------

SIMPLIFICATIONS: RuleSet = {
    "implementation": "use",
    "comprehensive": "complete",
    "methodologies": "methods",
    "necessitates": "needs",
    "utilization": "use",
    "multifaceted": "many-sided",
    "pedagogical": "teaching",
    "facilitate": "help",
    "optimal": "best",
    "outcomes": "results",
    "educational": "learning",
}

MISSPELLINGS: MisspellingTable = {
    "ths": ["this", "the", "thus"],
    "sentance": ["sentence"],
    "som": ["some", "sum"],
    "speling": ["spelling"],
    "erors": ["errors"],
    "ned": ["need", "end"],
    "corected": ["corrected"],
}

# ---------------------------------------------------------------------------
# Custom rule files
# ---------------------------------------------------------------------------

RULE_TABLE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "simplifications": {
            "type": "object",
            "propertyNames": {"minLength": 1},
            "additionalProperties": {"type": "string"},
        },
        "misspellings": {
            "type": "object",
            "propertyNames": {"minLength": 1},
            "additionalProperties": {
                "type": "array",
                "items": {"type": "string", "minLength": 1},
                "minItems": 1,
            },
        },
    },
    "additionalProperties": False,
}


@dataclass
class RuleTables:
    """A simplification rule set and a misspelling table, ready for the engine."""

    simplifications: RuleSet = field(default_factory=lambda: dict(SIMPLIFICATIONS))
    misspellings: MisspellingTable = field(
        default_factory=lambda: {k: list(v) for k, v in MISSPELLINGS.items()}
    )


def load_rule_tables(path: Union[str, Path]) -> RuleTables:
    """Load and validate a custom rule table JSON file.

    WHY: The built-in dictionaries are deliberately tiny. Schools or
    therapists may want their own word lists without a code change.

    HOW: Parse the file as UTF-8 JSON, validate with jsonschema, then
    build RuleTables, substituting the defaults for missing sections.
    Misspelling keys are lower-cased because detection lower-cases text
    before lookup.

    RULES:
    - Missing file, invalid JSON, or schema violation → RuleTableError
    - Missing section → default table for that section
    - Key order in the file is rule order

    Args:
        path: Path to the JSON rule file.

    Returns:
        RuleTables built from the file.

    Raises:
        RuleTableError: If the file cannot be read or fails validation.
    """
    rule_path = Path(path)
    try:
        data = json.loads(rule_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuleTableError("Cannot read rule file {}: {}".format(rule_path, exc)) from exc
    except json.JSONDecodeError as exc:
        raise RuleTableError("Rule file {} is not valid JSON: {}".format(rule_path, exc)) from exc

    try:
        jsonschema.validate(instance=data, schema=RULE_TABLE_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise RuleTableError(
            "Rule file {} is invalid: {}".format(rule_path, exc.message)
        ) from exc

    tables = RuleTables()
    if "simplifications" in data:
        tables.simplifications = dict(data["simplifications"])
    if "misspellings" in data:
        tables.misspellings = {
            word.lower(): list(suggestions)
            for word, suggestions in data["misspellings"].items()
        }

    logger.info(
        "Loaded rule file %s (%d simplifications, %d misspellings)",
        rule_path,
        len(tables.simplifications),
        len(tables.misspellings),
    )
    return tables
