"""
Movement & Instruction Classifier

Classifies one grid row at a time. The caller threads the pending rep
scheme ("21-15-9" on its own line) from one call into the next.

Rows look like:
    30 | DU                  -> Movement(30, Double Unders)
    15 | cal | ski:          -> Movement(15, Ski, cal)
    rest | 1:00              -> Descriptive(rest, 60s)
    8 | + | 25 | 11/16/25    -> SCORE (handed to the score classifier)
"""

import re
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from whiteboard_ingestor.config import ParserThresholds
from whiteboard_ingestor.models import (
    Descriptive,
    DescriptiveKind,
    LineLabel,
    Movement,
    WorkoutElement,
)
from whiteboard_ingestor.services.movement_normalizer import MovementLexicon
from .base import BaseLineClassifier

logger = logging.getLogger(__name__)


class LineKind(str, Enum):
    PENDING_AMOUNT = "pending_amount"
    ELEMENT = "element"
    SCORE = "score"
    UNRECOGNIZED = "unrecognized"


@dataclass
class LineClassification:
    """Result of classifying one body row."""
    kind: LineKind
    elements: List[WorkoutElement] = field(default_factory=list)
    pending_amount: Optional[str] = None
    # MM:SS dropped from the end of a movement row; belongs to scoring
    trailing_score: Optional[str] = None


KEYWORD_KINDS = {
    "rest": DescriptiveKind.REST,
    "repeat": DescriptiveKind.REPEAT,
    "then": DescriptiveKind.INSTRUCTION,
    "and": DescriptiveKind.INSTRUCTION,
}

DESCRIPTIVE_PHRASES = [
    'after each set',
    'after each round',
    'each set',
    'each round',
    'per set',
    'per round',
]
PHRASE_PATTERNS = [re.compile(r'\b' + phrase + r'\b', re.IGNORECASE) for phrase in DESCRIPTIVE_PHRASES]


class MovementClassifier(BaseLineClassifier):
    """Turns body rows into movements and descriptive notes"""

    SETS_ROUNDS_LINE_PATTERN = re.compile(r'^(\d+)\s+(sets?|rounds?)$', re.IGNORECASE)  # "3 Sets"
    DASH_REST_PATTERN = re.compile(r'rest\s+(\d{1,2}):(\d{2})', re.IGNORECASE)
    REVERSED_REST_PATTERN = re.compile(r'^(\d{1,2}:\d{2})\s+(rest|repeat|then|and)\b', re.IGNORECASE)
    KEYWORD_FIELD_PATTERN = re.compile(r'^(rest|repeat|then|and)$', re.IGNORECASE)
    WEIGHT_ROW_PATTERN = re.compile(r'^\d+(?:\.\d+)?\s*(?:lbs?|kg)$', re.IGNORECASE)  # "315 | lbs"
    ROUNDS_FIELD_PATTERN = re.compile(r'^\d+\s*rds?$', re.IGNORECASE)
    ROUND_LABEL_PATTERN = re.compile(r'^(round|set)\s*\d+\b', re.IGNORECASE)  # "Round 2: 3:45"
    START_STOP_PATTERN = re.compile(r'start:?\s*\d{1,2}:?\d{2}\s*,?\s*stop', re.IGNORECASE)
    NUMBERED_FIELD_PATTERN = re.compile(r'^\d+\.(?:\s|$)')  # "1." but not "1.5"
    LEADING_INT_PATTERN = re.compile(r'^\d+')

    # Order detection
    REVERSED_AMOUNT_PATTERN = re.compile(r'^\d+[a-zA-Z]*$')
    SHORT_UNIT_PATTERN = re.compile(r'^(cal|ca|cals|lbs|lb|kg|min|sec)$', re.IGNORECASE)

    # Accepted grid amounts: 21, 21-15-9, 5x5, 25', 200W, max
    AMOUNT_PATTERN = re.compile(
        r"^(\d+(?:-\d+)*|\d+\s*[xX]\s*\d+|\d+'|\d+[wW]|max|min|unlimited)$",
        re.IGNORECASE
    )

    # Fallbacks for rows without usable fields ("21 Hang Power Clean 135")
    LEGACY_AMOUNT = r'(\d+(?:-\d+)*|\d+\s*[xX]\s*\d+|\d+/\d+)'
    LEGACY_WITH_UNIT_PATTERN = re.compile(
        LEGACY_AMOUNT + r'\s+(.+?)\s+(\d+|lbs|kg|cal|m|ft|in|meters?|feet?)$',
        re.IGNORECASE
    )
    LEGACY_PATTERN = re.compile(LEGACY_AMOUNT + r'\s+(.+)$', re.IGNORECASE)

    # Post-processing
    INCHES_PATTERN = re.compile(r'(\d+)\s*(?:"|”|inches\b|inch\b|in\b)', re.IGNORECASE)
    BOX_LIKE_PATTERN = re.compile(r'\b(box|bj|bjo)', re.IGNORECASE)
    WATTAGE_PATTERN = re.compile(r'\b(\d+)\s*[wW]\b')
    BIKE_LIKE_PATTERN = re.compile(r'\b(bike|erg|echo|assault|airdyne)', re.IGNORECASE)
    HAS_LETTER_PATTERN = re.compile(r'[A-Za-z]')

    def __init__(
        self,
        lexicon: Optional[MovementLexicon] = None,
        strict: bool = False,
        thresholds: Optional[ParserThresholds] = None,
    ):
        super().__init__(thresholds)
        self.lexicon = lexicon or MovementLexicon.default()
        self.strict = strict

    def reset(self):
        self.warnings = []

    def classify(
        self,
        fields: List[str],
        pending_amount: Optional[str] = None,
        hint: Optional[LineLabel] = None,
    ) -> LineClassification:
        """
        Classify one row.

        Args:
            fields: Non-empty grid fields of the row
            pending_amount: Rep scheme carried over from an earlier row
            hint: MOVEMENT or INSTRUCTION when the extractor already tagged the row

        Returns:
            LineClassification; its pending_amount is what the next row should receive
        """
        if not fields:
            return LineClassification(LineKind.UNRECOGNIZED, pending_amount=pending_amount)

        trusted = hint in (LineLabel.MOVEMENT, LineLabel.INSTRUCTION)
        text = " ".join(fields)

        # Rep scheme on its own line waits for the next movement
        if len(fields) == 1 and self.is_rep_scheme(fields[0]):
            return LineClassification(LineKind.PENDING_AMOUNT, pending_amount=fields[0])

        if not trusted and self.is_header(text):
            return LineClassification(LineKind.UNRECOGNIZED, pending_amount=pending_amount)

        if text.startswith("-"):
            match = self.DASH_REST_PATTERN.search(text)
            duration = int(match.group(1)) * 60 + int(match.group(2)) if match else None
            return self._descriptive(text, DescriptiveKind.INSTRUCTION, duration, pending_amount)

        if self.SETS_ROUNDS_LINE_PATTERN.match(text):
            return self._descriptive(text, DescriptiveKind.INSTRUCTION, None, pending_amount)

        if not trusted and self.looks_like_score(fields, text):
            return LineClassification(LineKind.SCORE, pending_amount=pending_amount)

        keyword = self._rest_keyword(fields, text)
        if keyword:
            return self._descriptive(
                text, KEYWORD_KINDS[keyword], self.extract_rest_duration(text), pending_amount
            )

        if text.startswith("@"):
            return self._descriptive(
                text, DescriptiveKind.INSTRUCTION, self._first_time(text), pending_amount
            )

        if not trusted and len(fields) == 1 and self.is_time(fields[0]):
            return LineClassification(LineKind.SCORE, pending_amount=pending_amount)

        if hint == LineLabel.INSTRUCTION:
            return self._descriptive(text, DescriptiveKind.INSTRUCTION, None, pending_amount)

        return self._extract_movement(fields, pending_amount)

    def looks_like_score(self, fields: List[str], text: str) -> bool:
        """Rows shaped like results rather than prescriptions"""
        if self.NUMBER_PLUS_NUMBER_PATTERN.search(text) and not self.is_movement_text(fields, text):
            return True
        if self.WEIGHT_ROW_PATTERN.match(text):
            return True
        if (len(fields) >= 3 and fields[1] == "+"
                and self.LEADING_INT_PATTERN.match(fields[0])
                and self.LEADING_INT_PATTERN.match(fields[2])):
            return True
        if self.DATE_PATTERN.search(text):
            return True
        if self.ROUNDS_PLUS_REPS_PATTERN.search(text):
            return True
        if self.NUMBERED_FIELD_PATTERN.match(fields[0]):
            return True
        if self.ROUNDS_AT_TEXT_PATTERN.search(text):
            return True
        if self.ROUNDS_FIELD_PATTERN.match(fields[0]) and (len(fields) == 1 or fields[1] == "@"):
            return True
        if self.ROUND_LABEL_PATTERN.match(text) or self.START_STOP_PATTERN.search(text):
            return True
        return False

    def _rest_keyword(self, fields: List[str], text: str) -> Optional[str]:
        match = self.REST_KEYWORD_PATTERN.match(text)
        if match:
            return match.group(1).lower()
        match = self.REVERSED_REST_PATTERN.match(text)
        if match:
            return match.group(2).lower()
        if len(fields) >= 2 and self.is_time(fields[0]) and self.KEYWORD_FIELD_PATTERN.match(fields[1]):
            return fields[1].lower()
        return None

    def _first_time(self, text: str) -> Optional[int]:
        match = self.TIME_SEARCH_PATTERN.search(text)
        if not match:
            return None
        return int(match.group(1)) * 60 + int(match.group(2))

    def _descriptive(
        self,
        text: str,
        kind: DescriptiveKind,
        duration: Optional[int],
        pending_amount: Optional[str],
    ) -> LineClassification:
        element = WorkoutElement.of_descriptive(
            Descriptive(text=text, kind=kind, duration_seconds=duration)
        )
        return LineClassification(LineKind.ELEMENT, elements=[element], pending_amount=pending_amount)

    def _extract_movement(self, fields: List[str], pending_amount: Optional[str]) -> LineClassification:
        trailing_score = None
        if len(fields) >= 2 and self.is_time(fields[-1]):
            trailing_score = fields[-1]
            fields = fields[:-1]

        parsed = self._from_grid(fields, pending_amount)
        if parsed is not None:
            amount, exercise, unit, used_pending, note = parsed
        else:
            text, note = self._detach_phrase(fields)
            parsed = self._from_text(text, pending_amount) if text else None
            if parsed is None and note is None:
                return LineClassification(
                    LineKind.UNRECOGNIZED, pending_amount=pending_amount, trailing_score=trailing_score
                )
            amount, exercise, unit, used_pending = parsed or ("", "", None, False)

        next_pending = None if used_pending else pending_amount
        elements: List[WorkoutElement] = []

        movement = self._build_movement(amount, exercise, unit)
        if movement is not None:
            elements.append(WorkoutElement.of_movement(movement))
        if note:
            elements.append(WorkoutElement.of_descriptive(
                Descriptive(text=note, kind=DescriptiveKind.INSTRUCTION)
            ))

        if not elements:
            # MissingExercise: nothing usable on the row
            return LineClassification(
                LineKind.UNRECOGNIZED, pending_amount=pending_amount, trailing_score=trailing_score
            )

        return LineClassification(
            LineKind.ELEMENT,
            elements=elements,
            pending_amount=next_pending,
            trailing_score=trailing_score,
        )

    def _from_grid(
        self, fields: List[str], pending_amount: Optional[str]
    ) -> Optional[Tuple[str, str, Optional[str], bool, Optional[str]]]:
        """amount | exercise | unit, amount | unit | exercise, or pending | exercise | unit"""
        if len(fields) < 2 and not (pending_amount and fields):
            return None

        col0 = fields[0]
        col1 = fields[1] if len(fields) > 1 else ""
        col2 = fields[2] if len(fields) > 2 else ""
        used_pending = False
        note = None

        if (len(fields) >= 3 and self.REVERSED_AMOUNT_PATTERN.match(col0)
                and self.SHORT_UNIT_PATTERN.match(col1) and len(col2) > 1):
            amount = col0
            unit = "cal" if col1.lower() == "ca" else col1
            exercise = col2
        else:
            if pending_amount:
                amount, exercise, unit = pending_amount, col0, col1 or None
                used_pending = True
            else:
                amount, exercise, unit = col0, col1, col2 or None

            exercise, unit, note = self._split_phrase(exercise, unit, " ".join(fields))

        if not self.AMOUNT_PATTERN.match(amount.strip()):
            return None

        return amount.strip(), exercise, unit, used_pending, note

    def _split_phrase(
        self, exercise: str, unit: Optional[str], row_text: str
    ) -> Tuple[str, Optional[str], Optional[str]]:
        """
        'Burpees after each set' -> ('Burpees', unit, <whole row>)
        'Burpees' | 'each round' -> ('Burpees', None, 'each round')
        """
        for pattern in PHRASE_PATTERNS:
            match = pattern.search(exercise) if exercise else None
            if match:
                return exercise[:match.start()].strip(), unit, row_text
            if unit and pattern.search(unit):
                return exercise, None, unit.strip()
        return exercise, unit, None

    def _detach_phrase(self, fields: List[str]) -> Tuple[str, Optional[str]]:
        """
        Pull a descriptive phrase out of a row before the text fallbacks.

        '30 DU' | 'after each set' -> ('30 DU', 'after each set')
        '30 DU after each set'     -> ('30 DU', '30 DU after each set')
        """
        row_text = " ".join(fields)
        for i, text in enumerate(fields):
            for pattern in PHRASE_PATTERNS:
                match = pattern.search(text)
                if not match:
                    continue
                if i > 0 and match.start() == 0:
                    rest = fields[:i] + fields[i + 1:]
                    return " ".join(rest), text
                head = fields[:i] + [text[:match.start()].strip()]
                return " ".join(f for f in head if f), row_text
        return row_text, None

    def _from_text(
        self, text: str, pending_amount: Optional[str]
    ) -> Optional[Tuple[str, str, Optional[str], bool]]:
        """Regex fallbacks for rows the grid could not explain"""
        match = self.LEGACY_WITH_UNIT_PATTERN.match(text)
        if match:
            return match.group(1), match.group(2), match.group(3), False

        match = self.LEGACY_PATTERN.match(text)
        if match:
            return match.group(1), match.group(2), None, False

        if pending_amount:
            return pending_amount, text, None, True
        if len(text) > 3:
            return "1", text, None, False
        return None

    def _build_movement(self, amount: str, exercise: str, unit: Optional[str]) -> Optional[Movement]:
        # "8 | + 80 rpm bike"
        exercise = (exercise or "").strip().lstrip("+").strip()
        if not exercise or "|" in exercise or not self.HAS_LETTER_PATTERN.search(exercise):
            return None

        if self.BOX_LIKE_PATTERN.search(exercise):
            match = self.INCHES_PATTERN.search(exercise)
            if match:
                unit = f'{match.group(1)}"'
                exercise = self.INCHES_PATTERN.sub("", exercise, count=1).strip()

        if self.BIKE_LIKE_PATTERN.search(exercise):
            match = self.WATTAGE_PATTERN.search(exercise)
            if match:
                watts = f"{match.group(1)}W"
                exercise = self.WATTAGE_PATTERN.sub("", exercise, count=1).strip()
                if amount == "1":
                    amount = watts
                elif not unit:
                    unit = watts

        name = self._normalize(exercise)
        if not name:
            return None
        return Movement(amount=amount, exercise=name, unit=unit or None)

    def _normalize(self, exercise: str) -> Optional[str]:
        if not self.strict:
            return self.lexicon.normalize(exercise) or None

        match = self.lexicon.validate(exercise, self.thresholds.fuzzy_match_threshold)
        if not match.is_valid:
            self.add_warning(f"Unknown movement '{exercise}' dropped")
            return None
        return match.normalized
