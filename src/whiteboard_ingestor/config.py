"""Configuration settings for the whiteboard ingestor."""
import os
from typing import Optional

from pydantic import BaseModel, Field


class ParserThresholds(BaseModel):
    """Numeric cut-offs used by the parsing pipeline.

    Values are kept as they were tuned against real whiteboard photos.
    Override per parser instance rather than editing them here.
    """

    # Lone integers below this are reps (or seconds), at or above it MMSS digits
    reps_time_cutoff: int = 60
    # Times at or beyond one hour are not accepted as scores
    max_time_seconds: int = 3600
    # "<value> lbs" is only a weight score above this
    weight_minimum: float = 50
    # Written round time is replaced by stop - start when within this many seconds
    round_time_tolerance: int = 5
    # Validator tolerance when checking a written round time
    round_time_validation_tolerance: int = 2

    # Confidence blend
    token_weight: float = 0.4
    parse_success_weight: float = 0.3
    completeness_weight: float = 0.3
    parse_success_value: float = 0.9
    parse_failure_value: float = 0.5
    title_completeness: float = 0.3
    movement_completeness: float = 0.4
    score_completeness: float = 0.3
    default_token_confidence: float = Field(default=0.95, ge=0, le=1)

    # Ratio required for a fuzzy lexicon hit in strict mode
    fuzzy_match_threshold: float = Field(default=0.85, ge=0, le=1)

    class Config:
        extra = "ignore"


class Settings:
    """Application settings."""

    FIELD_DELIMITER: str = "|"
    STRICT_MOVEMENTS: bool = False
    DEFAULT_TOKEN_CONFIDENCE: float = 0.95
    ALIASES_PATH: Optional[str] = None

    def __init__(self):
        self.FIELD_DELIMITER = os.getenv("WHITEBOARD_FIELD_DELIMITER", "|") or "|"
        self.STRICT_MOVEMENTS = os.getenv("WHITEBOARD_STRICT_MOVEMENTS", "false").lower() == "true"

        try:
            self.DEFAULT_TOKEN_CONFIDENCE = float(
                os.getenv("WHITEBOARD_DEFAULT_TOKEN_CONFIDENCE", "0.95")
            )
        except ValueError:
            self.DEFAULT_TOKEN_CONFIDENCE = 0.95
        if not 0 <= self.DEFAULT_TOKEN_CONFIDENCE <= 1:
            self.DEFAULT_TOKEN_CONFIDENCE = 0.95

        self.ALIASES_PATH = os.getenv("WHITEBOARD_ALIASES_PATH") or None

    def thresholds(self) -> ParserThresholds:
        """Thresholds with environment overrides applied."""
        return ParserThresholds(default_token_confidence=self.DEFAULT_TOKEN_CONFIDENCE)


settings = Settings()
