"""
Workout-Type Detector and Description Generator

Keyword detection on the title with a structural fallback, template
descriptions, and replacement titles for bare codes like "E5MOM".
"""

import re
import logging
from typing import List, Sequence

from whiteboard_ingestor.models import Movement, ScoreElement, ScoreKind, WorkoutType
from .title import FALLBACK_TITLE, TitleInfo

logger = logging.getLogger(__name__)

INTERVAL_CODE_PATTERN = re.compile(r'\be(\d+)\s*mom', re.IGNORECASE)

# Checked in order after AMRAP and interval codes, first hit wins
TITLE_KEYWORDS = [
    ('emom', 'EMOM'),
    ('chipper', 'Chipper'),
    ('rounds for time', 'Rounds for Time'),
    ('for time', 'For Time'),
    ('for reps', 'For Reps'),
]

DESCRIPTION_TEMPLATES = {
    'AMRAP': 'An AMRAP with {movement1} and {movement2}.',
    'EMOM': 'An {type} with {movement1} and {movement2}.',
    'Chipper': 'A chipper with {movement1}, {movement2}, and {movement3}.',
    'Rounds for Time': 'A {type} with {movement1} and {movement2}.',
    'Lift': 'A {type} with {movement1}.',
    'For Time': 'A {type} with {movement1} and {movement2}.',
    'For Reps': 'A {type} with {movement1} and {movement2}.',
}
DEFAULT_TEMPLATE = 'A workout with {movement1} and {movement2}.'


def detect_workout_type(
    title: str,
    movements: Sequence[Movement],
    scores: Sequence[ScoreElement],
) -> WorkoutType:
    """Classify the workout archetype from its title, then its structure."""
    title_lower = title.lower()

    if 'amrap' in title_lower:
        return 'AMRAP'
    if INTERVAL_CODE_PATTERN.search(title_lower):
        return 'EMOM'
    for keyword, workout_type in TITLE_KEYWORDS:
        if keyword in title_lower:
            return workout_type

    if len(movements) == 1 and 'x' in movements[0].amount.lower():
        return 'Lift'
    if len(scores) == 1 and scores[0].kind == ScoreKind.TIME:
        return 'For Time'
    if len(scores) == 1 and scores[0].kind == ScoreKind.REPS:
        return 'For Reps'
    return 'workout'


def _movement_names(movements: Sequence[Movement], limit: int) -> List[str]:
    return [m.exercise for m in movements if m.exercise][:limit]


def generate_description(workout_type: str, movements: Sequence[Movement]) -> str:
    """'An AMRAP with Double Unders and Bike.'"""
    names = _movement_names(movements, 3)
    if not names:
        return f"A {workout_type} workout."

    template = DESCRIPTION_TEMPLATES.get(workout_type, DEFAULT_TEMPLATE)
    padded = names + ['movements'] * (3 - len(names))
    return template.format(
        type=workout_type,
        movement1=padded[0],
        movement2=padded[1],
        movement3=padded[2],
    )


def improve_title(info: TitleInfo, workout_type: str, movements: Sequence[Movement]) -> str:
    """
    Replace placeholder titles.

    "e5mom" -> "E5MOM"; "AMRAP" or the fallback title with movements ->
    "AMRAP: Double Unders + Bike".
    """
    title = info.title
    if not info.needs_improvement and not info.is_fallback:
        return title

    match = INTERVAL_CODE_PATTERN.fullmatch(title.strip())
    if match:
        return f"E{match.group(1)}MOM"

    names = _movement_names(movements, 2)
    if names:
        improved = f"{workout_type}: {' + '.join(names)}"
        logger.debug(f"Improved title '{title}' -> '{improved}'")
        return improved
    return title if not info.is_fallback else FALLBACK_TITLE
