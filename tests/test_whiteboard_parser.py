"""End-to-end tests for WhiteboardParser."""
import pytest
from unittest.mock import patch

from whiteboard_ingestor.models import DescriptiveKind, ScoreKind, ScoreName
from whiteboard_ingestor.parsers.whiteboard_parser import (
    WhiteboardParser,
    parse_whiteboard,
    parse_workout_from_raw_text,
)


@pytest.fixture
def parser(default_lexicon):
    return WhiteboardParser(default_lexicon, strict=False)


class TestScenarios:

    def test_amrap_with_rounds_plus_reps(self, parser, amrap_lines):
        result = parser.parse(amrap_lines)

        assert result.title == "AMRAP 10 min"
        assert result.workout_type == "AMRAP"
        assert [(m.amount, m.exercise, m.unit) for m in result.movements] == [
            ("30", "Double Unders", None),
            ("10", "Bike", "cal"),
        ]
        assert len(result.scores) == 1
        score = result.scores[0]
        assert score.name == ScoreName.TOTAL
        assert score.kind == ScoreKind.REPS
        assert score.value == "8 + 25"
        assert score.metadata.rounds == 8
        assert score.metadata.reps_into_next_round == 25
        # 8 rounds of (30 + 10) plus 25
        assert score.metadata.total_reps == 345

    def test_reversed_field_order(self, parser):
        result = parser.parse(["Row Ski Bike", "15 | cal | ski:"])
        movement = result.movements[0]
        assert (movement.amount, movement.exercise, movement.unit) == ("15", "Ski", "cal")

    def test_rest_line(self, parser):
        result = parser.parse(["Intervals", "rest | 1:00 |"])
        assert len(result.elements) == 1
        descriptive = result.elements[0].descriptive
        assert descriptive.text == "rest 1:00"
        assert descriptive.kind == DescriptiveKind.REST
        assert descriptive.duration_seconds == 60

    def test_empty_input(self, parser):
        result = parser.parse_text("")
        assert result.title == "Workout"
        assert result.elements == []
        assert result.scores == []
        assert result.workout_type == "workout"
        assert result.confidence == pytest.approx(0.53)


class TestBoards:

    def test_interval_board(self, parser, emom_lines):
        result = parser.parse(emom_lines)

        assert result.title == "E3MOM"
        assert result.workout_type == "EMOM"
        assert result.description == "An EMOM with Burpee and Wall Ball."
        assert [m.exercise for m in result.movements] == ["Burpee", "Wall Ball"]
        assert result.movements[1].unit == "20 lbs"
        assert [s.name for s in result.scores] == [ScoreName.ROUND_1, ScoreName.ROUND_2, ScoreName.ROUND_3]
        assert [s.metadata.time_in_seconds for s in result.scores] == [98, 142, 115]

    def test_single_time_is_finish_time(self, parser):
        result = parser.parse(["For Time", "21-15-9", "Thrusters | 95 lbs", "21-15-9 | Pull-ups", "4:32"])
        assert result.workout_type == "For Time"
        assert [m.amount for m in result.movements] == ["21-15-9", "21-15-9"]
        assert len(result.scores) == 1
        assert result.scores[0].name == ScoreName.FINISH_TIME
        assert result.scores[0].value == "4:32"

    def test_trailing_time_on_movement_row(self, parser):
        result = parser.parse(["For Time", "20 | WB | 4:32"])
        assert result.movements[0].exercise == "Wall Ball"
        assert result.movements[0].unit is None
        assert result.scores[0].name == ScoreName.FINISH_TIME
        assert result.scores[0].metadata.time_in_seconds == 272

    def test_rounds_at_cap(self, parser):
        result = parser.parse(["Chipper 11:00 CAP", "50 | Wall Balls", "50 | Box Jump", "9 rds @ 11min"])
        assert result.workout_type == "Chipper"
        score = result.scores[0]
        assert score.name == ScoreName.TIME_CAP
        assert score.metadata.rounds == 9
        assert score.metadata.total_reps == 900

    def test_bare_title_improved(self, parser):
        result = parser.parse(["AMRAP", "30 | DU", "10 | bike | cal"])
        assert result.title == "AMRAP: Double Unders + Bike"

    def test_interval_code_title_normalised(self, parser):
        result = parser.parse(["e4 mom", "10 | Burpees"])
        assert result.title == "E4MOM"

    def test_header_and_date_rows_are_not_movements(self, parser):
        result = parser.parse(["For Time", "10 | Burpees", "Score", "11/19/23 | 7:54"])
        assert [m.exercise for m in result.movements] == ["Burpee"]
        assert len(result.scores) == 1
        assert result.scores[0].metadata.time_in_seconds == 474

    def test_unlabelled_rounds_line_is_instruction(self, parser):
        result = parser.parse(["Murph", "5 Rounds", "20 | Pull-ups"])
        assert result.elements[0].type == "descriptive"
        assert result.elements[0].descriptive.text == "5 Rounds"
        assert result.scores == []

    def test_phrase_field_split_from_text_row(self, parser):
        """'30 DU' fails the grid amount check; the phrase still becomes its own note."""
        result = parser.parse(["for time", "30 DU | after each set", "8:15"])
        assert [(m.amount, m.exercise) for m in result.movements] == [("30", "Double Unders")]
        notes = [e.descriptive for e in result.elements if e.type == "descriptive"]
        assert [(n.text, n.kind) for n in notes] == [("after each set", DescriptiveKind.INSTRUCTION)]
        assert len(result.scores) == 1
        assert result.scores[0].name == ScoreName.FINISH_TIME
        assert result.scores[0].metadata.time_in_seconds == 495

    def test_weight_row_is_score(self):
        result = parse_workout_from_raw_text("Back Squat\n5x5 | Back Squat\n315 | lbs")
        assert [m.exercise for m in result.movements] == ["Back Squat"]
        assert len(result.scores) == 1
        score = result.scores[0]
        assert score.name == ScoreName.WEIGHT
        assert score.kind == ScoreKind.WEIGHT
        assert score.metadata.weight == 315.0
        assert score.metadata.unit == "lbs"

    def test_single_field_weight_row_is_score(self, parser):
        result = parser.parse(["Deadlift", "5 | Deadlift", "405 lbs"])
        assert [m.exercise for m in result.movements] == ["Deadlift"]
        assert result.scores[0].kind == ScoreKind.WEIGHT
        assert result.scores[0].metadata.weight == 405.0

    def test_plus_inside_movement_row_is_not_a_score(self, parser):
        result = parser.parse([
            "Â£5 MOM",
            "10 | |",
            "10 | RMU |",
            "8 | |",
            "8 | + 80 rpm bike nasal |",
            "8 | |",
            "6 | |",
            "Date | 11/18/25 |",
        ])
        assert result.title == "E5MOM"
        assert result.workout_type == "EMOM"
        assert [(m.amount, m.exercise) for m in result.movements] == [
            ("10", "Ring Muscle-up"),
            ("8", "80 Rpm Bike Nasal"),
        ]
        assert [(s.name, s.value) for s in result.scores] == [
            (ScoreName.TOTAL, "10"),
            (ScoreName.ROUND_1, "8"),
            (ScoreName.ROUND_2, "8"),
            (ScoreName.ROUND_3, "6"),
        ]
        assert all(s.metadata.rounds is None for s in result.scores)


class TestLabelledLines:

    def test_labels_route_lines(self, parser):
        result = parser.parse(
            ["Fran", "21-15-9", "Thrusters | 95 lbs", "21-15-9 | Pull-ups", "3:45"],
            labels=["TITLE", "MOVEMENT", "MOVEMENT", "MOVEMENT", "SCORE"],
        )
        assert result.title == "Fran"
        assert [m.exercise for m in result.movements] == ["Thruster", "Pull-up"]
        assert result.scores[0].name == ScoreName.FINISH_TIME

    def test_labelled_rounds_line_is_score(self, parser):
        result = parser.parse(
            ["Cindy", "5 | Pull-ups", "10 | Push-ups", "15 | Air Squats", "18 rounds"],
            labels=["TITLE", "MOVEMENT", "MOVEMENT", "MOVEMENT", "SCORE"],
        )
        assert len(result.scores) == 1
        assert result.scores[0].metadata.rounds == 18
        assert result.scores[0].metadata.total_reps == 540

    def test_ai_title_preferred(self, parser):
        result = parser.parse(
            ["E5MOM", "Deadlift Ladder", "5 | DL", "1:10", "1:05"],
            labels=["TITLE", "AITITLE", None, None, None],
        )
        assert result.title == "Deadlift Ladder"
        assert [m.exercise for m in result.movements] == ["Deadlift"]
        assert [s.name for s in result.scores] == [ScoreName.ROUND_1, ScoreName.ROUND_2]

    def test_prefixed_lines(self, parser):
        result = parser.parse(["TITLE: Fran", "MOVEMENT: 21-15-9 | Thrusters", "SCORE: 3:45"])
        assert result.title == "Fran"
        assert result.movements[0].exercise == "Thruster"
        assert result.scores[0].value == "3:45"

    def test_instruction_label(self, parser):
        result = parser.parse(
            ["Strength", "Build to a heavy single", "1 | Deadlift"],
            labels=["TITLE", "INSTRUCTION", "MOVEMENT"],
        )
        assert result.elements[0].descriptive.kind == DescriptiveKind.INSTRUCTION
        assert result.elements[1].movement.exercise == "Deadlift"

    def test_positional_title_line_tagged_movement_is_kept(self, parser):
        result = parser.parse(
            ["30 | DU", "10 | bike | cal", "5 | + | 12"],
            labels=["MOVEMENT", "MOVEMENT", "SCORE"],
        )
        assert [m.exercise for m in result.movements] == ["Double Unders", "Bike"]
        assert len(result.scores) == 1
        assert result.scores[0].metadata.rounds == 5
        assert result.scores[0].metadata.total_reps == 5 * 40 + 12

    def test_untagged_positional_title_line_is_skipped(self, parser):
        result = parser.parse(
            ["Sprint Day", "10 | bike | cal"],
            labels=[None, "MOVEMENT"],
        )
        assert result.title == "Sprint Day"
        assert [m.exercise for m in result.movements] == ["Bike"]


class TestWarningsAndFallback:

    def test_dangling_rep_scheme_warns(self, parser):
        result = parser.parse(["Fran", "21-15-9"])
        assert result.movements == []
        assert any("21-15-9" in w for w in result.warnings)

    def test_strict_mode_drops_unknown_movements(self, default_lexicon):
        parser = WhiteboardParser(default_lexicon, strict=True)
        result = parser.parse(["For Time", "10 | Zorbflap", "30 | DU"])
        assert [m.exercise for m in result.movements] == ["Double Unders"]
        assert any("Zorbflap" in w for w in result.warnings)

    def test_failure_degrades_to_fallback(self, parser):
        with patch(
            "whiteboard_ingestor.parsers.whiteboard_parser.TitleExtractor.extract",
            side_effect=RuntimeError("boom"),
        ):
            result = parser.parse(["AMRAP", "30 | DU"])

        assert result.title == "Workout"
        assert result.elements == []
        assert result.warnings == ["Failed to parse whiteboard: boom"]
        assert result.confidence == pytest.approx(0.53)

    def test_token_confidences_as_percentages(self, parser, amrap_lines):
        result = parser.parse(amrap_lines, token_confidences=[50, 50])
        # 0.5 * 0.4 + 0.9 * 0.3 + 1.0 * 0.3
        assert result.confidence == pytest.approx(0.77)


class TestModuleFunctions:

    def test_parse_is_deterministic(self, amrap_lines):
        first = parse_whiteboard(amrap_lines)
        second = parse_whiteboard(amrap_lines)
        assert first.model_dump() == second.model_dump()

    def test_raw_text_matches_lines(self, amrap_lines):
        by_text = parse_workout_from_raw_text("\n".join(amrap_lines))
        assert by_text.model_dump() == parse_whiteboard(amrap_lines).model_dump()

    def test_raw_text_pipe_debris(self):
        result = parse_workout_from_raw_text("AMRAP | | | 12 min\n\n| 15 || cal | ski: |\n")
        assert result.title == "AMRAP 12 min"
        assert result.movements[0].exercise == "Ski"
