"""
Whiteboard Parser

Runs the pipeline over one board:
- grid lines (with optional extractor labels)
- title and its metadata
- body rows folded through the movement classifier
- score rows through the score classifier
- rep reconciliation, type, description, confidence

Parsing never raises; a failure degrades to an empty "Workout" result.
"""

import logging
from typing import List, Optional, Sequence

from whiteboard_ingestor.config import ParserThresholds, settings
from whiteboard_ingestor.models import LineLabel, ScoreElement, WorkoutElement, WorkoutExtraction
from whiteboard_ingestor.services.movement_normalizer import MovementLexicon
from whiteboard_ingestor.services.score_validator import validate_score_element
from .confidence import calculate_confidence
from .grid import GridLine, clean_pipe_output, prepare_lines
from .movement_classifier import LineKind, MovementClassifier
from .reconcile import reconcile_rep_totals, reps_per_round
from .score_classifier import ScoreClassifier
from .title import FALLBACK_TITLE, TitleExtractor, TitleInfo
from .workout_type import detect_workout_type, generate_description, improve_title

logger = logging.getLogger(__name__)


class WhiteboardParser:
    """Parses extractor lines into a WorkoutExtraction"""

    def __init__(
        self,
        lexicon: Optional[MovementLexicon] = None,
        thresholds: Optional[ParserThresholds] = None,
        strict: Optional[bool] = None,
        delimiter: Optional[str] = None,
    ):
        self.lexicon = lexicon or MovementLexicon.default()
        self.thresholds = thresholds or settings.thresholds()
        self.strict = settings.STRICT_MOVEMENTS if strict is None else strict
        self.delimiter = delimiter or settings.FIELD_DELIMITER

    def parse(
        self,
        lines: Sequence[str],
        labels: Optional[Sequence[Optional[str]]] = None,
        token_confidences: Optional[Sequence[float]] = None,
    ) -> WorkoutExtraction:
        """
        Parse one board.

        Args:
            lines: Extractor output, one string per visual line
            labels: Optional per-line hints (TITLE, AITITLE, MOVEMENT, INSTRUCTION, SCORE)
            token_confidences: Optional per-token recognition confidences

        Returns:
            WorkoutExtraction, always fully populated
        """
        try:
            grid = prepare_lines(lines, labels, self.delimiter)
            return self._parse_grid(grid, token_confidences)
        except Exception as e:
            logger.exception(f"Failed to parse whiteboard: {e}")
            return self._fallback(token_confidences, f"Failed to parse whiteboard: {e}")

    def parse_text(self, raw_text: str) -> WorkoutExtraction:
        """Parse a raw multi-line payload without labels."""
        try:
            cleaned = clean_pipe_output(raw_text or "", self.delimiter)
            grid = prepare_lines(cleaned.splitlines(), None, self.delimiter, strip_prefixes=False)
            return self._parse_grid(grid, None)
        except Exception as e:
            logger.exception(f"Failed to parse whiteboard text: {e}")
            return self._fallback(None, f"Failed to parse whiteboard text: {e}")

    def _parse_grid(
        self,
        grid: List[GridLine],
        token_confidences: Optional[Sequence[float]],
    ) -> WorkoutExtraction:
        title_info = TitleExtractor().extract(grid)

        movement_classifier = MovementClassifier(self.lexicon, self.strict, self.thresholds)
        score_classifier = ScoreClassifier(title_info.time_cap, self.thresholds)

        elements: List[WorkoutElement] = []
        score_rows: List[List[str]] = []
        pending: Optional[str] = None

        for index, line in enumerate(grid):
            if index == title_info.line_index and not self._tagged_body_line(title_info, line):
                continue
            if line.label in (LineLabel.TITLE, LineLabel.AI_TITLE):
                continue
            if line.label == LineLabel.SCORE:
                score_rows.append(line.fields)
                continue

            result = movement_classifier.classify(line.fields, pending, line.label)
            pending = result.pending_amount
            elements.extend(result.elements)

            if line.label is None and result.kind in (LineKind.SCORE, LineKind.UNRECOGNIZED):
                score_rows.append(line.fields)
            elif result.trailing_score:
                score_rows.append([result.trailing_score])

        if pending:
            movement_classifier.add_warning(f"Rep scheme '{pending}' had no movement to attach to")

        for row in score_rows:
            score_classifier.classify(row)
        scores = score_classifier.finalize()

        movements = [e.movement for e in elements if e.type == "movement" and e.movement]
        reconcile_rep_totals(scores, movements)

        workout_type = detect_workout_type(title_info.title, movements, scores)
        title = improve_title(title_info, workout_type, movements)
        description = generate_description(workout_type, movements)

        warnings = movement_classifier.warnings + score_classifier.warnings
        warnings.extend(self._validate_scores(scores, reps_per_round(movements)))

        confidence = calculate_confidence(
            elements,
            scores,
            has_title=not title_info.is_fallback,
            token_confidences=token_confidences,
            thresholds=self.thresholds,
        )

        logger.info(
            f"Parsed whiteboard '{title}' ({workout_type}): {len(movements)} movements, "
            f"{len(elements) - len(movements)} notes, {len(scores)} scores, confidence {confidence:.2f}"
        )

        return WorkoutExtraction(
            title=title,
            description=description,
            workout_type=workout_type,
            elements=elements,
            scores=scores,
            confidence=confidence,
            warnings=warnings,
        )

    @staticmethod
    def _tagged_body_line(title_info: TitleInfo, line: GridLine) -> bool:
        """Positional title line the extractor tagged as body content"""
        return (title_info.source == 'positional'
                and line.label in (LineLabel.MOVEMENT, LineLabel.INSTRUCTION))

    def _validate_scores(self, scores: List[ScoreElement], per_round: int) -> List[str]:
        warnings = []
        for score in scores:
            result = validate_score_element(score, per_round or None)
            warnings.extend(f"{score.name.value} {w}" for w in result.warnings)
        return warnings

    def _fallback(self, token_confidences: Optional[Sequence[float]], reason: str) -> WorkoutExtraction:
        confidence = calculate_confidence(
            [], [], has_title=False, token_confidences=token_confidences, thresholds=self.thresholds
        )
        return WorkoutExtraction(
            title=FALLBACK_TITLE,
            description=generate_description("workout", []),
            elements=[],
            scores=[],
            confidence=confidence,
            warnings=[reason],
        )


def parse_whiteboard(
    lines: Sequence[str],
    labels: Optional[Sequence[Optional[str]]] = None,
    token_confidences: Optional[Sequence[float]] = None,
) -> WorkoutExtraction:
    """Parse with the default lexicon and settings."""
    return WhiteboardParser().parse(lines, labels, token_confidences)


def parse_workout_from_raw_text(raw_text: str) -> WorkoutExtraction:
    """Parse a raw multi-line extractor payload (no labels)."""
    return WhiteboardParser().parse_text(raw_text)
