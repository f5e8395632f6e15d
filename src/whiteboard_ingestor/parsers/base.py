"""
Base Line Classifier

Shared patterns and warning bookkeeping for the per-line classifiers.
"""

import re
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from whiteboard_ingestor.config import ParserThresholds
from whiteboard_ingestor.utils import parse_mmss_to_seconds

logger = logging.getLogger(__name__)


class BaseLineClassifier(ABC):
    """Abstract base class for grid line classifiers"""

    # Regex patterns for common whiteboard notations
    TIME_PATTERN = re.compile(r'^\d{1,2}:\d{2}$')  # "3:45", "12:03"
    TIME_SEARCH_PATTERN = re.compile(r'(\d{1,2}):(\d{2})')
    DATE_PATTERN = re.compile(r'\d{1,2}/\d{1,2}/\d{2,4}')  # "11/16/25"
    DATE_FIELD_PATTERN = re.compile(r'^\d{1,2}/\d{1,2}/\d{2,4}$')
    REP_SCHEME_PATTERN = re.compile(r'^\d+(?:-\d+)+$')  # "21-15-9"
    SETS_REPS_PATTERN = re.compile(r'^(\d+)\s*[xX×]\s*(\d+)$')  # "5x5"
    REST_KEYWORD_PATTERN = re.compile(r'^(rest|repeat|then|and)\b', re.IGNORECASE)
    REST_RATIO_PATTERN = re.compile(r'\b1\s*:\s*1\b')  # "rest 1:1"
    ROUNDS_PLUS_REPS_PATTERN = re.compile(
        r'(\d+)\s*(?:rounds?|rds?)\s*\+\s*(\d+)\s*(?:reps?)?',
        re.IGNORECASE
    )  # "8 rounds + 25 reps"
    NUMBER_PLUS_NUMBER_PATTERN = re.compile(r'(\d+)\s*\+\s*(\d+)')  # "8 + 25"
    ROUNDS_AT_TEXT_PATTERN = re.compile(r'\d+\s*rds?\s*@', re.IGNORECASE)  # "9 rds @ 11min"
    NUMBERED_PATTERN = re.compile(r'^(\d+)\.(?:\s+(.*))?$')  # "1." or "1. 3:45", not "1.5"
    ROUNDS_AT_CAP_PATTERN = re.compile(r'^(\d+)\s*(?:rounds?|rds?)\b', re.IGNORECASE)  # "9 rds @ 11min"
    HEADER_PATTERN = re.compile(
        r'^(workout|score|scores|results?|rounds?|sets?|time|reps?|'
        r'for\s+time|for\s+reps|amrap|emom|chipper)$',
        re.IGNORECASE
    )
    EXERCISE_KEYWORD_PATTERN = re.compile(
        r'\b(deadlift|squat|press|clean|snatch|jerk|thruster|burpee|pull.?up|push.?up|'
        r'muscle.?up|toes.?to.?bar|kettlebell|dumbbell|barbell|wall.?ball|box.?jump|'
        r'double.?under|single.?under|row|bike|run|ski|cal|rpm|du|wb|ctb|bjo|hpc|dl|sn|cj|'
        r'fs|bs|ohs|pu|mu|rmu|hspu|t2b|ttb|kbs)\b',
        re.IGNORECASE
    )

    def __init__(self, thresholds: Optional[ParserThresholds] = None):
        self.thresholds = thresholds or ParserThresholds()
        self.warnings: List[str] = []

    @abstractmethod
    def reset(self):
        """Clear per-parse state before a new board"""
        pass

    def is_time(self, text: str) -> bool:
        return bool(self.TIME_PATTERN.match(text.strip()))

    def is_date(self, text: str) -> bool:
        return bool(self.DATE_FIELD_PATTERN.match(text.strip()))

    def is_header(self, text: str) -> bool:
        return bool(self.HEADER_PATTERN.match(text.strip()))

    def is_rep_scheme(self, text: str) -> bool:
        return bool(self.REP_SCHEME_PATTERN.match(text.strip()))

    def is_movement_text(self, fields: List[str], text: str) -> bool:
        """
        Exercise words on a row that has no rounds-plus-reps or '@' shape.

        "8 | + 80 rpm bike nasal" is a prescription, "9 rds | @ | 11min" is not.
        """
        if not self.EXERCISE_KEYWORD_PATTERN.search(text):
            return False
        if self.ROUNDS_PLUS_REPS_PATTERN.search(text) or self.ROUNDS_AT_TEXT_PATTERN.search(text):
            return False
        return not (len(fields) >= 2 and fields[1] == "@")

    def extract_rest_duration(self, text: str) -> Optional[int]:
        """First MM:SS in the text, or 60 for a '1:1' work/rest ratio"""
        if self.REST_RATIO_PATTERN.search(text):
            return 60
        match = self.TIME_SEARCH_PATTERN.search(text)
        if match:
            return parse_mmss_to_seconds(f"{match.group(1)}:{match.group(2)}")
        return None

    def add_warning(self, warning: str):
        """Add a warning message"""
        self.warnings.append(warning)
        logger.warning(f"Parser warning: {warning}")
