"""Rule-based text simplifier and spelling corrector.

WHY: Long words and long clauses are the main obstacles for dyslexic
readers; common misspellings are the main obstacle for dyslexic writers.
Both are handled with small, deterministic dictionaries instead of NLP,
so the output is predictable and easy to explain to a user.

HOW: LexicalEngine holds a simplification RuleSet and a misspelling
table (injected; defaults from rules.py). simplify() lower-cases, applies
every substitution rule in declaration order, splits clauses at commas
and re-capitalizes sentence starts. detect_misspellings() looks up each
whitespace token (stripped of non-word characters) in the misspelling
table. apply_suggestion() and auto_correct_all() rewrite text from the
detected errors.

RULES:
- Every operation is total over the empty string
- simplify() loses the original casing (lower-case first, then re-capitalize)
- Simplification rules match substrings anywhere, including inside the
  output of earlier rules
- Detection never guesses: words missing from the table are not flagged
- SpellingError.position is a token index into the text at detection time
- apply_suggestion() raises IndexOutOfRangeError for a stale position
- auto_correct_all() replaces each distinct misspelled word everywhere it
  occurs (substrings included), once per word, so repeated errors do not
  double-apply
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from reading_aid.core.errors import IndexOutOfRangeError
from reading_aid.core.rules import (
    MISSPELLINGS,
    SIMPLIFICATIONS,
    MisspellingTable,
    RuleSet,
    RuleTables,
    load_rule_tables,
)

logger = logging.getLogger(__name__)

# Comma followed by whitespace: a clause boundary worth turning into a sentence.
_CLAUSE_BREAK_RE = re.compile(r",\s+")

# First word character of the text or of each ". " sentence.
_SENTENCE_START_RE = re.compile(r"(^|\. )(\w)")

_NON_WORD_RE = re.compile(r"[^\w]")

# Leading and trailing punctuation of a token, around its word characters.
_TOKEN_EDGES_RE = re.compile(r"^(\W*)(.*?)(\W*)$")


@dataclass
class SpellingError:
    """A dictionary misspelling found at a token position.

    RULES:
    - word: the cleaned, lower-cased token that matched the table
    - position: index of the token in text.split() at detection time
    - suggestions: replacements in priority order (first is the default)
    """

    word: str
    position: int
    suggestions: List[str] = field(default_factory=list)


class LexicalEngine:
    """Applies simplification and spelling rules from injected tables.

    WHY: The dictionaries are data, not logic. Injecting them at
    construction lets tests and deployments swap tables freely while the
    rewriting behavior stays the same.

    HOW: Simplification patterns are compiled once in declaration order.
    The misspelling table is used as a plain dict lookup.
    """

    def __init__(
        self,
        simplifications: Optional[RuleSet] = None,
        misspellings: Optional[MisspellingTable] = None,
    ) -> None:
        self.simplifications: RuleSet = dict(
            SIMPLIFICATIONS if simplifications is None else simplifications
        )
        self.misspellings: MisspellingTable = {
            word: list(suggestions)
            for word, suggestions in (
                MISSPELLINGS if misspellings is None else misspellings
            ).items()
        }
        self._simplify_patterns = [
            (re.compile(re.escape(complex_word), re.IGNORECASE), simple_word)
            for complex_word, simple_word in self.simplifications.items()
        ]

    @classmethod
    def from_tables(cls, tables: RuleTables) -> "LexicalEngine":
        return cls(simplifications=tables.simplifications, misspellings=tables.misspellings)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "LexicalEngine":
        """Build an engine from a custom JSON rule file (see rules.load_rule_tables)."""
        return cls.from_tables(load_rule_tables(path))

    # ------------------------------------------------------------------
    # Simplifier
    # ------------------------------------------------------------------

    def simplify(self, text: str) -> str:
        """Rewrite text with simpler words and shorter sentences.

        HOW:
        1. Lower-case everything.
        2. Apply each substitution rule to every occurrence, in order.
        3. Turn ", " clause breaks into ". " sentence breaks.
        4. Upper-case the first character of the text and of each sentence.

        Args:
            text: Any text, possibly empty.

        Returns:
            The simplified text.
        """
        simplified = text.lower()

        for pattern, simple_word in self._simplify_patterns:
            simplified = pattern.sub(lambda _match: simple_word, simplified)

        simplified = _CLAUSE_BREAK_RE.sub(". ", simplified)

        return _SENTENCE_START_RE.sub(
            lambda match: match.group(1) + match.group(2).upper(),
            simplified,
        )

    # ------------------------------------------------------------------
    # Corrector
    # ------------------------------------------------------------------

    def detect_misspellings(self, text: str) -> List[SpellingError]:
        """Flag every token whose cleaned form is a known misspelling.

        HOW: Lower-case and split on whitespace; strip non-word characters
        from each token ("Sentance." → "sentance") and look it up.

        RULES:
        - One SpellingError per matching token, left to right
        - position counts every whitespace token, matched or not
        - Suggestion lists are copies; mutating them leaves the table intact

        Args:
            text: The text to check.

        Returns:
            Detected errors in reading order (empty list if none).
        """
        errors: List[SpellingError] = []
        for position, token in enumerate(text.lower().split()):
            clean_word = _NON_WORD_RE.sub("", token)
            suggestions = self.misspellings.get(clean_word)
            if suggestions:
                errors.append(SpellingError(
                    word=clean_word,
                    position=position,
                    suggestions=list(suggestions),
                ))

        logger.debug("Detected %d misspelling(s)", len(errors))
        return errors

    def apply_suggestion(self, text: str, error: SpellingError, suggestion: str) -> str:
        """Replace the misspelled word at error.position with suggestion.

        WHY: The user picks one suggestion for one occurrence; other
        occurrences of the same misspelling stay untouched.

        HOW: Re-split the current text on whitespace, replace the first
        case-insensitive occurrence of error.word inside the token at
        error.position (punctuation around it survives), and rejoin with
        single spaces. Detection strips punctuation from inside a word too
        ("th's" is looked up as "ths"), so when the token does not contain
        error.word literally but its cleaned form equals it, the word part
        of the token is replaced and only its outer punctuation is kept.

        RULES:
        - Inter-word whitespace is normalized to single spaces
        - Position outside the current tokens → IndexOutOfRangeError
        - Token at position that neither contains error.word nor cleans to
          it → IndexOutOfRangeError (the text changed since detection)

        Raises:
            IndexOutOfRangeError: If the error is stale for this text.
        """
        words = text.split()
        if not 0 <= error.position < len(words):
            raise IndexOutOfRangeError(error.position, len(words))

        token = words[error.position]
        pattern = re.compile(re.escape(error.word), re.IGNORECASE)
        replaced, count = pattern.subn(lambda _match: suggestion, token, count=1)
        if count == 0:
            if _NON_WORD_RE.sub("", token.lower()) != error.word:
                raise IndexOutOfRangeError(
                    error.position,
                    len(words),
                    "Token {!r} at position {} does not contain {!r}; re-run detection.".format(
                        token, error.position, error.word
                    ),
                )
            leading, _word, trailing = _TOKEN_EDGES_RE.match(token).groups()
            replaced = leading + suggestion + trailing

        words[error.position] = replaced
        return " ".join(words)

    def auto_correct_all(self, text: str, errors: Iterable[SpellingError]) -> str:
        """Replace every detected misspelling with its top suggestion.

        HOW: For each error in detection order, globally replace every
        case-insensitive occurrence of error.word with suggestions[0].
        A word already corrected is skipped, since its occurrences are
        gone after the first pass ("som" -> "some" must not run twice
        and produce "somee").

        RULES:
        - Errors without suggestions are skipped
        - Substring matching: "ths" inside "months" is replaced as well
        - Text not covered by an error is returned unchanged
        """
        corrected = text
        applied: set = set()

        for error in errors:
            if not error.suggestions or error.word in applied:
                continue
            applied.add(error.word)
            replacement = error.suggestions[0]
            pattern = re.compile(re.escape(error.word), re.IGNORECASE)
            corrected = pattern.sub(lambda _match: replacement, corrected)

        logger.debug("Auto-corrected %d distinct word(s)", len(applied))
        return corrected


# ---------------------------------------------------------------------------
# Module-level helpers bound to the default tables
# ---------------------------------------------------------------------------

_default_engine = LexicalEngine()


def simplify(text: str) -> str:
    return _default_engine.simplify(text)


def detect_misspellings(text: str) -> List[SpellingError]:
    return _default_engine.detect_misspellings(text)


def apply_suggestion(text: str, error: SpellingError, suggestion: str) -> str:
    return _default_engine.apply_suggestion(text, error, suggestion)


def auto_correct_all(text: str, errors: Iterable[SpellingError]) -> str:
    return _default_engine.auto_correct_all(text, errors)
