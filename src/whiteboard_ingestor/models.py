"""Data models for whiteboard ingestion."""
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

WorkoutType = Literal[
    'AMRAP',
    'EMOM',
    'Chipper',
    'Rounds for Time',
    'For Time',
    'For Reps',
    'Lift',
    'workout',
]


class LineLabel(str, Enum):
    """Category hint attached to a line by the upstream extractor."""
    TITLE = "title"
    AI_TITLE = "ai_title"
    MOVEMENT = "movement"
    INSTRUCTION = "instruction"
    SCORE = "score"

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> Optional["LineLabel"]:
        """Map 'TITLE', 'AITITLE', 'AI TITLE', 'Score'... to a label, None otherwise."""
        if not raw:
            return None
        key = raw.strip().lower().replace(" ", "").replace("_", "")
        return _LABEL_KEYS.get(key)


_LABEL_KEYS = {
    "title": LineLabel.TITLE,
    "aititle": LineLabel.AI_TITLE,
    "movement": LineLabel.MOVEMENT,
    "instruction": LineLabel.INSTRUCTION,
    "score": LineLabel.SCORE,
}


class DescriptiveKind(str, Enum):
    REST = "rest"
    REPEAT = "repeat"
    INSTRUCTION = "instruction"
    NONE = "none"


class ScoreKind(str, Enum):
    TIME = "time"
    REPS = "reps"
    WEIGHT = "weight"
    OTHER = "other"


class ScoreName(str, Enum):
    """Closed set of names a score can carry."""
    SET_1 = "Set 1"
    SET_2 = "Set 2"
    SET_3 = "Set 3"
    SET_4 = "Set 4"
    SET_5 = "Set 5"
    ROUND_1 = "Round 1"
    ROUND_2 = "Round 2"
    ROUND_3 = "Round 3"
    ROUND_4 = "Round 4"
    ROUND_5 = "Round 5"
    ROUND_6 = "Round 6"
    ROUND_7 = "Round 7"
    ROUND_8 = "Round 8"
    ROUND_9 = "Round 9"
    ROUND_10 = "Round 10"
    FINISH_TIME = "Finish Time"
    TOTAL = "Total"
    TIME_CAP = "Time Cap"
    WEIGHT = "Weight"
    OTHER = "Other"

    @classmethod
    def for_round(cls, index: int) -> "ScoreName":
        """Round N, or Other when N falls outside 1..10."""
        try:
            return cls(f"Round {index}")
        except ValueError:
            return cls.OTHER

    @classmethod
    def for_set(cls, index: int) -> "ScoreName":
        """Set N, or Other when N falls outside 1..5."""
        try:
            return cls(f"Set {index}")
        except ValueError:
            return cls.OTHER


class Movement(BaseModel):
    """A prescribed movement: amount, exercise and optional unit."""
    amount: str
    exercise: str = Field(..., min_length=1)
    unit: Optional[str] = None


class Descriptive(BaseModel):
    """A non-movement note such as a rest period or instruction."""
    text: str
    kind: DescriptiveKind = DescriptiveKind.NONE
    duration_seconds: Optional[int] = None


class WorkoutElement(BaseModel):
    """Either a movement or a descriptive note, in board order."""
    type: Literal['movement', 'descriptive']
    movement: Optional[Movement] = None
    descriptive: Optional[Descriptive] = None

    @classmethod
    def of_movement(cls, movement: Movement) -> "WorkoutElement":
        return cls(type="movement", movement=movement)

    @classmethod
    def of_descriptive(cls, descriptive: Descriptive) -> "WorkoutElement":
        return cls(type="descriptive", descriptive=descriptive)


class ScoreMetadata(BaseModel):
    time_in_seconds: Optional[int] = None
    rounds: Optional[int] = None
    reps_into_next_round: Optional[int] = None
    total_reps: Optional[int] = None
    weight: Optional[float] = None
    unit: Optional[str] = None
    start_time: Optional[str] = None
    stop_time: Optional[str] = None
    round_time_seconds: Optional[int] = None


class ScoreElement(BaseModel):
    """A recorded result line."""
    name: ScoreName
    kind: ScoreKind
    value: str
    metadata: Optional[ScoreMetadata] = None


class WorkoutExtraction(BaseModel):
    """Structured result of parsing one whiteboard."""
    title: str
    description: Optional[str] = None
    workout_type: WorkoutType = 'workout'
    elements: List[WorkoutElement] = Field(default_factory=list)
    scores: List[ScoreElement] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0, le=1)
    warnings: List[str] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @property
    def movements(self) -> List[Movement]:
        return [e.movement for e in self.elements if e.type == "movement" and e.movement]
