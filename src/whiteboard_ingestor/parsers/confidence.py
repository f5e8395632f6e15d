"""Confidence scoring for a parsed whiteboard."""
import logging
from typing import Optional, Sequence

from whiteboard_ingestor.config import ParserThresholds
from whiteboard_ingestor.models import ScoreElement, WorkoutElement

logger = logging.getLogger(__name__)


def average_token_confidence(
    token_confidences: Optional[Sequence[float]],
    thresholds: ParserThresholds,
) -> float:
    """Mean extractor confidence; values above 1 are percentages."""
    if not token_confidences:
        return thresholds.default_token_confidence

    values = [c / 100 if c > 1 else c for c in token_confidences]
    values = [min(max(c, 0.0), 1.0) for c in values]
    return sum(values) / len(values)


def calculate_confidence(
    elements: Sequence[WorkoutElement],
    scores: Sequence[ScoreElement],
    has_title: bool,
    token_confidences: Optional[Sequence[float]] = None,
    thresholds: Optional[ParserThresholds] = None,
) -> float:
    """
    Blend extractor confidence, parse success and completeness.

    0.4 * avg_token_confidence + 0.3 * parse_success + 0.3 * completeness,
    clamped to [0, 1].
    """
    t = thresholds or ParserThresholds()

    avg_confidence = average_token_confidence(token_confidences, t)
    parse_success = t.parse_success_value if (elements or scores) else t.parse_failure_value

    has_movements = any(e.type == "movement" for e in elements)
    completeness = (
        (t.title_completeness if has_title else 0)
        + (t.movement_completeness if has_movements else 0)
        + (t.score_completeness if scores else 0)
    )

    confidence = (
        avg_confidence * t.token_weight
        + parse_success * t.parse_success_weight
        + completeness * t.completeness_weight
    )
    confidence = min(max(confidence, 0.0), 1.0)
    logger.debug(
        f"Confidence {confidence:.3f} (tokens={avg_confidence:.2f}, "
        f"success={parse_success}, completeness={completeness:.2f})"
    )
    return confidence
