"""Consistency checks for parsed scores.

Findings never block a parse; they are reported back as warnings.
"""
import re
import logging
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from whiteboard_ingestor.models import ScoreElement, ScoreKind, ScoreName
from whiteboard_ingestor.utils import ROUND_TIME_VALIDATION_TOLERANCE, parse_time_to_seconds, validate_round_time

logger = logging.getLogger(__name__)

TIME_VALUE_PATTERN = re.compile(r'^\d+:\d{2}$')
REPS_VALUE_PATTERNS = [
    re.compile(r'^\d+$'),
    re.compile(r'^\d+\s*\+\s*\d+$'),  # "8 + 25"
    re.compile(r'^\d+\s*(?:rounds?|rds?)\s*(?:\+\s*\d+\s*(?:reps?)?)?(?:\s*@.*)?$', re.IGNORECASE),
]
LEADING_NUMBER_PATTERN = re.compile(r'^\s*(\d+(?:\.\d+)?)')


class ValidationWarning(BaseModel):
    field: str
    message: str
    severity: Literal['error', 'warning'] = 'warning'

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationResult(BaseModel):
    is_valid: bool = True
    warnings: List[ValidationWarning] = Field(default_factory=list)


def is_valid_score_name(name: str) -> bool:
    try:
        ScoreName(name)
        return True
    except ValueError:
        return False


def validate_score_type(score: ScoreElement) -> List[ValidationWarning]:
    """Value format must fit the score kind, and metadata must agree with it."""
    warnings: List[ValidationWarning] = []
    value = str(score.value)
    meta = score.metadata

    if score.kind == ScoreKind.TIME:
        parsed = parse_time_to_seconds(value)
        if parsed is None and not TIME_VALUE_PATTERN.match(value):
            warnings.append(ValidationWarning(
                field="value",
                message=f"Time value \"{value}\" doesn't match time format (MM:SS)",
            ))
        if meta and meta.time_in_seconds is not None and parsed is not None:
            if abs(parsed - meta.time_in_seconds) > 1:
                warnings.append(ValidationWarning(
                    field="metadata.time_in_seconds",
                    message=f"time_in_seconds ({meta.time_in_seconds}) doesn't match parsed value ({parsed})",
                ))

    elif score.kind == ScoreKind.REPS:
        if not any(p.match(value) for p in REPS_VALUE_PATTERNS):
            warnings.append(ValidationWarning(
                field="value",
                message=f"Reps value \"{value}\" doesn't match expected format",
            ))

    elif score.kind == ScoreKind.WEIGHT:
        match = LEADING_NUMBER_PATTERN.match(value)
        if not match:
            warnings.append(ValidationWarning(
                field="value",
                message=f"Weight value \"{value}\" is not a valid number",
                severity="error",
            ))
        elif meta and meta.weight is not None and abs(float(match.group(1)) - meta.weight) > 0.01:
            warnings.append(ValidationWarning(
                field="metadata.weight",
                message=f"weight ({meta.weight}) doesn't match value ({match.group(1)})",
            ))

    return warnings


def validate_amrap_total_reps(score: ScoreElement, reps_per_round: int) -> List[ValidationWarning]:
    """total_reps should equal rounds * reps_per_round + reps_into_next_round (within 1)."""
    meta = score.metadata
    if score.kind != ScoreKind.REPS or meta is None:
        return []
    if meta.rounds is None or meta.reps_into_next_round is None or meta.total_reps is None:
        return []

    calculated = meta.rounds * reps_per_round + meta.reps_into_next_round
    if abs(calculated - meta.total_reps) > 1:
        return [ValidationWarning(
            field="metadata.total_reps",
            message=(
                f"total_reps ({meta.total_reps}) doesn't match calculation: {meta.rounds} rounds x "
                f"{reps_per_round} reps/round + {meta.reps_into_next_round} reps = {calculated}"
            ),
        )]
    return []


def validate_round_time_calculation(
    score: ScoreElement,
    tolerance: int = ROUND_TIME_VALIDATION_TOLERANCE,
) -> List[ValidationWarning]:
    """round_time_seconds should equal stop - start."""
    meta = score.metadata
    if meta is None or not meta.start_time or not meta.stop_time:
        return []

    is_valid, calculated, discrepancy = validate_round_time(
        meta.start_time, meta.stop_time, meta.round_time_seconds, tolerance=tolerance
    )
    if not is_valid and discrepancy is not None:
        return [ValidationWarning(
            field="metadata.round_time_seconds",
            message=(
                f"round_time_seconds ({meta.round_time_seconds}) doesn't match calculated time "
                f"({calculated}s). Discrepancy: {discrepancy}s"
            ),
        )]
    return []


def validate_score_element(score: ScoreElement, reps_per_round: Optional[int] = None) -> ValidationResult:
    """Run every check that applies to one score."""
    warnings = validate_score_type(score)

    if reps_per_round and score.kind == ScoreKind.REPS:
        warnings.extend(validate_amrap_total_reps(score, reps_per_round))

    warnings.extend(validate_round_time_calculation(score))

    for warning in warnings:
        logger.debug(f"Score '{score.name.value}' {warning}")

    return ValidationResult(
        is_valid=not any(w.severity == "error" for w in warnings),
        warnings=warnings,
    )
