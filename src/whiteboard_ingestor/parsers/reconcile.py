"""Rep-total reconciliation for rounds-based scores."""
import re
import logging
from typing import Iterable, List

from whiteboard_ingestor.models import Movement, ScoreElement, ScoreKind

logger = logging.getLogger(__name__)

SETS_REPS_PATTERN = re.compile(r'^(\d+)\s*[xX×]\s*(\d+)$')
LEADING_NUMBER_PATTERN = re.compile(r'^(\d+)(?:[-/](\d+))*$')


def amount_reps(amount: str) -> int:
    """
    Reps one round contributes for a movement amount.

    "21" -> 21, "21-15-9" -> 21, "5x5" -> 25, "30/24" -> 30.
    Heights, wattages and keywords ("24'", "200W", "max") count 0.
    """
    text = (amount or "").strip()
    match = SETS_REPS_PATTERN.match(text)
    if match:
        return int(match.group(1)) * int(match.group(2))
    match = LEADING_NUMBER_PATTERN.match(text)
    if match:
        return int(match.group(1))
    return 0


def reps_per_round(movements: Iterable[Movement]) -> int:
    return sum(amount_reps(m.amount) for m in movements)


def reconcile_rep_totals(scores: List[ScoreElement], movements: Iterable[Movement]) -> List[ScoreElement]:
    """Replace provisional total_reps with rounds * reps_per_round + reps_into_next_round."""
    per_round = reps_per_round(movements)
    if per_round == 0:
        return scores

    for score in scores:
        meta = score.metadata
        if score.kind != ScoreKind.REPS or meta is None:
            continue
        if meta.rounds is None or meta.reps_into_next_round is None:
            continue
        total = meta.rounds * per_round + meta.reps_into_next_round
        logger.debug(
            f"Reconciled {score.name.value}: {meta.rounds} x {per_round} + "
            f"{meta.reps_into_next_round} = {total} (was {meta.total_reps})"
        )
        meta.total_reps = total

    return scores
