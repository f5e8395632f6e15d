"""
Grid Builder

Turns pipe-delimited extractor lines into rows of trimmed fields.
"30 | Double Unders |" -> ["30", "Double Unders"]
"""

import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from whiteboard_ingestor.models import LineLabel

logger = logging.getLogger(__name__)

GridRow = List[str]

# Upper-case label words only, so board text like "Time | 4:02" is left alone
LABEL_PREFIX_PATTERN = re.compile(
    r'^(TITLE|AITITLE|AI TITLE|MOVEMENT|INSTRUCTION|SCORE)(?::\s*|\s+)(.+)$'
)


@dataclass
class GridLine:
    """One non-empty input line split into fields, with its optional hint."""
    fields: GridRow
    label: Optional[LineLabel] = None

    @property
    def text(self) -> str:
        return " ".join(self.fields)


def parse_line_to_grid(line: Optional[str], delimiter: str = "|") -> Optional[GridRow]:
    """Split a line into trimmed, non-empty fields. None when nothing is left."""
    if line is None:
        return None
    parts = [part.strip() for part in line.split(delimiter)]
    parts = [part for part in parts if part]
    return parts or None


def clean_pipe_output(raw_text: str, delimiter: str = "|") -> str:
    """
    Normalise a whole extractor payload.

    "AMRAP | | 10 min" -> "AMRAP | 10 min"
    "25:55 | | | 11/9/25" -> "25:55 | 11/9/25"
    """
    cleaned = []
    for line in raw_text.splitlines():
        parts = [" ".join(part.split()) for part in line.split(delimiter)]
        cleaned.append(f" {delimiter} ".join(part for part in parts if part))
    return "\n".join(cleaned)


def strip_label_prefix(line: str) -> Tuple[Optional[LineLabel], str]:
    """'MOVEMENT: 30 | DU' -> (LineLabel.MOVEMENT, '30 | DU')"""
    match = LABEL_PREFIX_PATTERN.match(line.strip())
    if not match:
        return None, line
    return LineLabel.from_raw(match.group(1)), match.group(2)


def build_grid(lines: Sequence[str], delimiter: str = "|") -> List[GridRow]:
    """Grid rows for every line that has at least one field."""
    rows = []
    for line in lines:
        row = parse_line_to_grid(line, delimiter)
        if row is not None:
            rows.append(row)
    return rows


def prepare_lines(
    lines: Sequence[str],
    labels: Optional[Sequence[Optional[str]]] = None,
    delimiter: str = "|",
    strip_prefixes: bool = True,
) -> List[GridLine]:
    """
    Pair each non-empty line with its category hint.

    An entry in ``labels`` wins over a prefix written into the line itself.
    Empty lines are dropped together with their label.
    """
    prepared: List[GridLine] = []
    for i, raw in enumerate(lines):
        if raw is None:
            continue

        label = None
        if labels is not None and i < len(labels):
            label = labels[i] if isinstance(labels[i], LineLabel) else LineLabel.from_raw(labels[i])

        text = raw
        if strip_prefixes:
            prefix_label, text = strip_label_prefix(raw)
            if label is None:
                label = prefix_label

        fields = parse_line_to_grid(text, delimiter)
        if fields is None:
            continue
        prepared.append(GridLine(fields=fields, label=label))

    logger.debug(f"Prepared {len(prepared)} grid lines from {len(lines)} input lines")
    return prepared
