"""Whiteboard workout ingestion: extractor lines in, structured workouts out."""
from .models import WorkoutExtraction
from .parsers.whiteboard_parser import WhiteboardParser, parse_whiteboard, parse_workout_from_raw_text

__version__ = "0.1.0"

__all__ = [
    "WhiteboardParser",
    "WorkoutExtraction",
    "parse_whiteboard",
    "parse_workout_from_raw_text",
]
