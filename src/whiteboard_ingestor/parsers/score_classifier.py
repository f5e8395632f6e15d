"""
Score Classifier

Turns result rows into ScoreElements. One instance per parse: it keeps the
running round/set index and the time cap mined from the title.

    3:45                -> time, 225s
    8 | + | 25          -> reps, 8 rounds + 25
    Round 2: | 4:06     -> time named Round 2
    315 | lbs           -> weight
"""

import re
import logging
from typing import List, Optional, Set

from whiteboard_ingestor.config import ParserThresholds
from whiteboard_ingestor.models import ScoreElement, ScoreKind, ScoreMetadata, ScoreName
from whiteboard_ingestor.utils import (
    auto_correct_round_time,
    format_seconds_to_time,
    parse_mmss_to_seconds,
    parse_time_to_seconds,
)
from .base import BaseLineClassifier

logger = logging.getLogger(__name__)


class ScoreClassifier(BaseLineClassifier):
    """Classifies result rows and names them"""

    ROUND_LABEL_PATTERN = re.compile(r'^(round|set)\s*(\d+)\s*:?\s*(.*)$', re.IGNORECASE)
    START_STOP_PATTERN = re.compile(
        r'start:?\s*(\d{1,2}):?(\d{2})\s*,?\s*stop:?\s*(\d{1,2}):?(\d{2})'
        r'(?:\D*?(\d{1,2}:\d{2}))?',
        re.IGNORECASE
    )  # "Start: 0:00, Stop: 1:13" with an optional written round time after it
    REVERSED_REST_PATTERN = re.compile(r'^(\d{1,2}:\d{2})\s+(rest|repeat|then|and)\b', re.IGNORECASE)
    DASH_REST_PATTERN = re.compile(r'^-\s*(rest|repeat|then|and)\b', re.IGNORECASE)
    WEIGHT_PATTERN = re.compile(r'^(\d+(?:\.\d+)?)\s*(lbs?|kg)?$', re.IGNORECASE)  # "315", "315lbs"
    WEIGHT_UNIT_PATTERN = re.compile(r'^(lbs?|kg)$', re.IGNORECASE)

    def __init__(self, time_cap: Optional[int] = None, thresholds: Optional[ParserThresholds] = None):
        super().__init__(thresholds)
        self.time_cap = time_cap
        self.reset()

    def reset(self):
        self.warnings = []
        self.scores: List[ScoreElement] = []
        self.round_index = 0
        self.set_index = 0
        self._auto_named: Set[int] = set()

    def classify(self, fields: List[str]) -> Optional[ScoreElement]:
        """Classify one row; the score is also kept for finalize()."""
        fields = [f.strip() for f in fields if f and f.strip()]
        if not fields:
            return None

        explicit: Optional[ScoreName] = None
        label = self._split_round_label(fields)
        if label is not None:
            kind, index, fields = label
            if kind == "set":
                self.set_index = index
                self.round_index = 0
                explicit = ScoreName.for_set(index)
            else:
                self.round_index = index
                explicit = ScoreName.for_round(index)
            if not fields:
                return None

        # Dates are metadata, never values
        fields = [self.DATE_PATTERN.sub("", f).strip() for f in fields]
        fields = [f for f in fields if f]
        if not fields:
            return None

        text = " ".join(fields)
        if self.is_header(text) or self._is_descriptive(fields, text):
            return None

        score = (
            self._numbered(fields)
            or self._start_stop(text, explicit)
            or self._trailing_time(fields, explicit)
            or self._single_value(fields, explicit)
            or self._rounds_plus_reps(fields, text, explicit)
            or self._rounds_only(text, explicit)
            or self._weight(fields, text)
        )
        if score is None:
            logger.debug(f"No score pattern matched: {text!r}")
            return None

        self.scores.append(score)
        return score

    def finalize(self) -> List[ScoreElement]:
        """Apply the whole-board naming rules and return the scores."""
        time_positions = [i for i, s in enumerate(self.scores) if s.kind == ScoreKind.TIME]

        if len(time_positions) == 1:
            self.scores[time_positions[0]].name = ScoreName.FINISH_TIME
        else:
            auto_positions = [i for i in time_positions if i in self._auto_named]
            if len(auto_positions) >= 2:
                for number, i in enumerate(auto_positions, start=1):
                    self.scores[i].name = ScoreName.for_round(number)

        return self.scores

    def _split_round_label(self, fields: List[str]):
        """'Round 2: 3:45' / 'Round | 2 | 3:45' -> ('round', 2, ['3:45'])"""
        match = self.ROUND_LABEL_PATTERN.match(fields[0])
        if match:
            remainder = [match.group(3).strip()] if match.group(3).strip() else []
            return match.group(1).lower(), int(match.group(2)), remainder + fields[1:]
        if len(fields) >= 2 and fields[0].lower() in ("round", "set") and fields[1].rstrip(":").isdigit():
            return fields[0].lower(), int(fields[1].rstrip(":")), fields[2:]
        return None

    def _is_descriptive(self, fields: List[str], text: str) -> bool:
        if self.REST_KEYWORD_PATTERN.match(text) or self.REVERSED_REST_PATTERN.match(text):
            return True
        if self.DASH_REST_PATTERN.match(text):
            return True
        return fields[0].startswith("@")

    def _name(self, kind: ScoreKind, explicit: Optional[ScoreName], at_cap: bool = False) -> ScoreName:
        """Set N > Time Cap > Finish Time/Total (first) > Round N"""
        if explicit is not None:
            return explicit
        if self.set_index > 0:
            return ScoreName.for_set(self.set_index)
        if at_cap and self.time_cap is not None:
            return ScoreName.TIME_CAP
        if self.round_index == 0:
            return ScoreName.FINISH_TIME if kind == ScoreKind.TIME else ScoreName.TOTAL
        return ScoreName.for_round(self.round_index)

    def _emit(
        self,
        kind: ScoreKind,
        value: str,
        metadata: ScoreMetadata,
        explicit: Optional[ScoreName],
        at_cap: bool = False,
    ) -> ScoreElement:
        name = self._name(kind, explicit, at_cap)
        if explicit is None and self.set_index == 0 and name != ScoreName.TIME_CAP:
            self._auto_named.add(len(self.scores))
        self.round_index += 1
        return ScoreElement(name=name, kind=kind, value=value, metadata=metadata)

    def _time(self, seconds: int, explicit: Optional[ScoreName], **extra) -> ScoreElement:
        metadata = ScoreMetadata(time_in_seconds=seconds, **extra)
        return self._emit(ScoreKind.TIME, format_seconds_to_time(seconds), metadata, explicit)

    def _numbered(self, fields: List[str]) -> Optional[ScoreElement]:
        """'1. | 3:45' or '1. 3:45' -> Round 1"""
        match = self.NUMBERED_PATTERN.match(fields[0])
        if not match:
            return None
        value = (match.group(2) or "").strip() or (fields[1] if len(fields) > 1 else "")
        if not value:
            return None

        index = int(match.group(1))
        self.round_index = index
        name = ScoreName.for_round(index)

        if ":" in value or (value.isdigit() and int(value) >= self.thresholds.reps_time_cutoff):
            seconds = parse_time_to_seconds(value)
            if seconds is not None and seconds < self.thresholds.max_time_seconds:
                return self._time(seconds, name)
        if value.isdigit():
            reps = int(value)
            return self._emit(ScoreKind.REPS, value, ScoreMetadata(total_reps=reps), name)
        return None

    def _start_stop(self, text: str, explicit: Optional[ScoreName]) -> Optional[ScoreElement]:
        match = self.START_STOP_PATTERN.search(text)
        if not match:
            return None

        start = f"{int(match.group(1))}:{match.group(2)}"
        stop = f"{int(match.group(3))}:{match.group(4)}"
        if parse_mmss_to_seconds(start) is None or parse_mmss_to_seconds(stop) is None:
            return None

        written = parse_mmss_to_seconds(match.group(5)) if match.group(5) else None
        round_time = auto_correct_round_time(
            start, stop, written, tolerance=self.thresholds.round_time_tolerance
        )
        if round_time < 0:
            self.add_warning(f"Stop time {stop} is before start time {start}")
            return None

        return self._time(
            round_time,
            explicit,
            start_time=start,
            stop_time=stop,
            round_time_seconds=round_time,
        )

    def _trailing_time(self, fields: List[str], explicit: Optional[ScoreName]) -> Optional[ScoreElement]:
        """A bare MM:SS in the last field is this row's score"""
        if not self.is_time(fields[-1]):
            return None
        seconds = parse_mmss_to_seconds(fields[-1])
        if seconds is None or seconds >= self.thresholds.max_time_seconds:
            return None
        return self._time(seconds, explicit)

    def _single_value(self, fields: List[str], explicit: Optional[ScoreName]) -> Optional[ScoreElement]:
        if len(fields) != 1:
            return None
        value = fields[0]

        if ":" in value:
            seconds = parse_time_to_seconds(value)
            if seconds is not None and seconds < self.thresholds.max_time_seconds:
                return self._time(seconds, explicit)
            return None

        if not value.isdigit():
            return None

        num = int(value)
        if num >= self.thresholds.reps_time_cutoff:
            seconds = parse_time_to_seconds(value)
            if seconds is not None and seconds < self.thresholds.max_time_seconds:
                return self._time(seconds, explicit)

        return self._emit(
            ScoreKind.REPS, value, ScoreMetadata(total_reps=num), explicit, at_cap=True
        )

    def _rounds_plus_reps(
        self, fields: List[str], text: str, explicit: Optional[ScoreName]
    ) -> Optional[ScoreElement]:
        """'8 | + | 25', '8 + 25', '3 rounds + 15 reps'"""
        if len(fields) >= 3 and fields[1] == "+" and fields[0].isdigit() and fields[2].isdigit():
            rounds, reps = int(fields[0]), int(fields[2])
            value = f"{rounds} + {reps}"
        else:
            match = self.ROUNDS_PLUS_REPS_PATTERN.search(text)
            if match:
                value = text
            else:
                match = self.NUMBER_PLUS_NUMBER_PATTERN.search(text)
                if not match or self.is_movement_text(fields, text):
                    return None
                value = f"{match.group(1)} + {match.group(2)}"
            rounds, reps = int(match.group(1)), int(match.group(2))

        metadata = ScoreMetadata(
            rounds=rounds,
            reps_into_next_round=reps,
            total_reps=rounds + reps,  # provisional, reconciled against the movements later
        )
        return self._emit(ScoreKind.REPS, value, metadata, explicit, at_cap="@" in text)

    def _rounds_only(self, text: str, explicit: Optional[ScoreName]) -> Optional[ScoreElement]:
        """'9 rds @ 11min', '8 rounds'"""
        match = self.ROUNDS_AT_CAP_PATTERN.match(text)
        if not match:
            return None
        rounds = int(match.group(1))
        metadata = ScoreMetadata(rounds=rounds, reps_into_next_round=0, total_reps=rounds)
        return self._emit(ScoreKind.REPS, text, metadata, explicit, at_cap="@" in text)

    def _weight(self, fields: List[str], text: str) -> Optional[ScoreElement]:
        """'315 lbs', '315 | lbs', '102.5kg'"""
        if len(fields) == 1:
            candidate = fields[0]
        elif len(fields) == 2 and self.WEIGHT_UNIT_PATTERN.match(fields[1]):
            candidate = f"{fields[0]} {fields[1]}"
        else:
            return None

        match = self.WEIGHT_PATTERN.match(candidate)
        if not match:
            return None
        weight, unit = float(match.group(1)), match.group(2)
        if weight <= self.thresholds.weight_minimum:
            return None

        name = ScoreName.for_set(self.set_index) if self.set_index > 0 else ScoreName.WEIGHT
        metadata = ScoreMetadata(weight=weight, unit=(unit or "lbs").lower())
        return ScoreElement(name=name, kind=ScoreKind.WEIGHT, value=text, metadata=metadata)
