"""Movement name normalization against the alias lexicon.

The lexicon maps whiteboard shorthand ("du", "t2b", "wb") to canonical
movement names. It is loaded once from ``data/movement_aliases.json`` and
passed into the classifiers, so tests can build their own.
"""
import re
import json
import logging
from dataclasses import dataclass
from difflib import SequenceMatcher
from pathlib import Path
from typing import Dict, List, Optional, Union

from whiteboard_ingestor.config import settings

logger = logging.getLogger(__name__)

DEFAULT_ALIASES_PATH = Path(__file__).parent.parent / "data" / "movement_aliases.json"

TRAILING_PUNCTUATION = re.compile(r'[:;.,!?]+$')
WORD_SEPARATORS = re.compile(r'[\s\-_.]+')

FUZZY_MATCH_THRESHOLD = 0.85


@dataclass
class MovementMatch:
    """Outcome of a strict lexicon lookup."""
    normalized: str
    original: str
    is_valid: bool
    was_matched: bool


class MovementLexicon:
    """Read-only alias table for movement names."""

    _default_cache: Optional["MovementLexicon"] = None

    def __init__(self, movements: Dict[str, List[str]], version: str = "1.0.0"):
        self.version = version
        self._movements: Dict[str, List[str]] = {
            name: list(aliases) for name, aliases in movements.items()
        }
        # Later entries override earlier ones for shared aliases
        self._lookup: Dict[str, str] = {}
        for standard, aliases in self._movements.items():
            for alias in aliases:
                self._lookup[alias.lower()] = standard
            self._lookup[standard.lower()] = standard

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "MovementLexicon":
        """Load a lexicon from an alias JSON file."""
        with open(path, "r") as f:
            data = json.load(f)
        lexicon = cls(data.get("movements", {}), version=data.get("version", "1.0.0"))
        logger.debug(f"Loaded {len(lexicon)} movements from {path}")
        return lexicon

    @classmethod
    def default(cls) -> "MovementLexicon":
        """The bundled lexicon (or WHITEBOARD_ALIASES_PATH), loaded once."""
        if cls._default_cache is not None:
            return cls._default_cache

        path = settings.ALIASES_PATH or DEFAULT_ALIASES_PATH
        try:
            cls._default_cache = cls.from_file(path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load movement aliases from {path}: {e}")
            # Empty lexicon still normalizes by title-casing
            return cls({}, version="0.0.0")
        return cls._default_cache

    def __len__(self) -> int:
        return len(self._movements)

    def __contains__(self, name: str) -> bool:
        return name in self._movements

    def canonical_names(self) -> List[str]:
        return list(self._movements)

    def aliases_for(self, standard_name: str) -> List[str]:
        return list(self._movements.get(standard_name, []))

    def lookup(self, name: str) -> Optional[str]:
        """Exact (case-insensitive) alias lookup."""
        return self._lookup.get(name.strip().lower())

    def normalize(self, original: str) -> str:
        """
        Canonical name for a movement, or a title-cased cleanup when unknown.

        "du" -> "Double Unders", "ski:" -> "Ski", "air-squat" -> "Air Squat".
        """
        if not original or not original.strip():
            return ""

        trimmed = TRAILING_PUNCTUATION.sub("", original.strip())
        standard = self._lookup.get(trimmed.lower())
        if standard:
            return standard

        words = [w for w in WORD_SEPARATORS.split(trimmed) if w]
        return " ".join(w[0].upper() + w[1:].lower() for w in words)

    def find_closest(self, name: str, threshold: float = FUZZY_MATCH_THRESHOLD) -> Optional[str]:
        """Best fuzzy match across canonical names and aliases."""
        target = name.strip().lower()
        if not target:
            return None

        best_match: Optional[str] = None
        best_score = 0.0
        for candidate, standard in self._lookup.items():
            if candidate == target:
                return standard
            # Fuzzy match using SequenceMatcher (similar to Levenshtein ratio)
            score = SequenceMatcher(None, target, candidate).ratio()
            if score >= threshold and score > best_score:
                best_match = standard
                best_score = score

        return best_match

    def validate(self, original: str, threshold: float = FUZZY_MATCH_THRESHOLD) -> MovementMatch:
        """Strict lookup: alias hit, then fuzzy match, else not valid."""
        if not original or not original.strip():
            return MovementMatch(normalized="", original=original or "", is_valid=False, was_matched=False)

        trimmed = TRAILING_PUNCTUATION.sub("", original.strip())
        normalized = self.normalize(trimmed)
        if normalized in self._movements:
            return MovementMatch(normalized=normalized, original=trimmed, is_valid=True, was_matched=True)

        closest = self.find_closest(trimmed, threshold) or self.find_closest(normalized, threshold)
        if closest:
            logger.debug(f"Fuzzy matched movement '{trimmed}' -> '{closest}'")
            return MovementMatch(normalized=closest, original=trimmed, is_valid=True, was_matched=True)

        return MovementMatch(normalized=normalized, original=trimmed, is_valid=False, was_matched=False)
