"""Unit tests for rep-total reconciliation."""
import pytest

from whiteboard_ingestor.models import Movement, ScoreElement, ScoreKind, ScoreMetadata, ScoreName
from whiteboard_ingestor.parsers.reconcile import amount_reps, reconcile_rep_totals, reps_per_round


def movement(amount, exercise="Burpee"):
    return Movement(amount=amount, exercise=exercise)


def rounds_score(rounds, reps, kind=ScoreKind.REPS):
    return ScoreElement(
        name=ScoreName.TOTAL,
        kind=kind,
        value=f"{rounds} + {reps}",
        metadata=ScoreMetadata(rounds=rounds, reps_into_next_round=reps, total_reps=rounds + reps),
    )


class TestAmountReps:

    @pytest.mark.parametrize("amount,expected", [
        ("21", 21),
        ("21-15-9", 21),
        ("5x5", 25),
        ("3 X 10", 30),
        ("30/24", 30),
        ("24'", 0),
        ("200W", 0),
        ("max", 0),
        ("", 0),
    ])
    def test_amount_reps(self, amount, expected):
        assert amount_reps(amount) == expected

    def test_reps_per_round(self):
        assert reps_per_round([movement("30"), movement("10"), movement("200W")]) == 40
        assert reps_per_round([]) == 0


class TestReconcile:

    def test_amrap_total(self):
        """8 rounds of 30 + 10, plus 25 reps into the ninth."""
        scores = reconcile_rep_totals([rounds_score(8, 25)], [movement("30"), movement("10")])
        assert scores[0].metadata.total_reps == 345

    def test_rounds_only(self):
        scores = reconcile_rep_totals([rounds_score(9, 0)], [movement("10"), movement("15")])
        assert scores[0].metadata.total_reps == 225

    def test_no_countable_movements_leaves_provisional_total(self):
        scores = reconcile_rep_totals([rounds_score(8, 25)], [movement("max")])
        assert scores[0].metadata.total_reps == 33

    def test_plain_reps_untouched(self):
        score = ScoreElement(
            name=ScoreName.TOTAL,
            kind=ScoreKind.REPS,
            value="45",
            metadata=ScoreMetadata(total_reps=45),
        )
        reconcile_rep_totals([score], [movement("30")])
        assert score.metadata.total_reps == 45

    def test_time_scores_untouched(self):
        score = ScoreElement(
            name=ScoreName.FINISH_TIME,
            kind=ScoreKind.TIME,
            value="3:45",
            metadata=ScoreMetadata(time_in_seconds=225),
        )
        reconcile_rep_totals([score], [movement("30")])
        assert score.metadata.total_reps is None
