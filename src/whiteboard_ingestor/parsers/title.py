"""
Title & Metadata Extractor

Picks the title line and mines it for time cap, interval period and
multi-set structure.
"""

import re
import logging
from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple

from whiteboard_ingestor.models import LineLabel
from .grid import GridLine

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "Workout"

TitleSource = Literal['ai', 'labeled', 'positional', 'fallback']


@dataclass
class SetsInfo:
    sets: int
    rounds: int


@dataclass
class TitleInfo:
    """Chosen title plus anything mined from it."""
    title: str = FALLBACK_TITLE
    time_cap: Optional[int] = None  # seconds
    interval_period: Optional[int] = None  # minutes, E5MOM -> 5
    sets_info: Optional[SetsInfo] = None
    needs_improvement: bool = False
    source: TitleSource = 'fallback'
    line_index: Optional[int] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == 'fallback'


class TitleExtractor:
    """Selects and cleans the workout title"""

    TIME_CAP_MINUTES_PATTERN = re.compile(r'(\d+)\s*(?:min|minute|m)\s*(?:cap|time\s*cap)', re.IGNORECASE)
    TIME_CAP_CLOCK_PATTERN = re.compile(r'(\d{1,2}):(\d{2})\s*cap', re.IGNORECASE)  # "11:00 CAP"
    INTERVAL_CODE_PATTERN = re.compile(r'E(\d+)\s*MOM', re.IGNORECASE)  # "E5MOM", "E5 MOM"
    INTERVAL_PHRASE_PATTERN = re.compile(r'(\d+)\s*(?:min|minute|m)\s*emom', re.IGNORECASE)
    SETS_ROUNDS_PATTERN = re.compile(r'(\d+)\s*sets?\s*,?\s*(\d+)\s*(?:rds?|rounds?)', re.IGNORECASE)

    BARE_INTERVAL_CODE = re.compile(r'^E\d+\s*MOM$', re.IGNORECASE)
    BARE_KEYWORD = re.compile(r'^(AMRAP|EMOM|CHIPPER)$', re.IGNORECASE)

    def extract(self, lines: List[GridLine]) -> TitleInfo:
        """Choose the title: AI title > labelled title > first line."""
        if not lines:
            return TitleInfo()

        index, source = self._select(lines)
        title = self.clean(" ".join(lines[index].fields))

        if len(title) < 2:
            logger.debug(f"Title line {index} too short after cleaning, using fallback")
            info = TitleInfo(source='fallback', line_index=index)
        else:
            info = TitleInfo(title=title, source=source, line_index=index)
            self._mine(title, info)

        # Fill gaps from the other title-tagged lines
        for i, line in enumerate(lines):
            if i == index or line.label not in (LineLabel.TITLE, LineLabel.AI_TITLE):
                continue
            self._mine(self.clean(" ".join(line.fields)), info, fill_only=True)

        if info.source != 'ai' and not info.is_fallback:
            info.needs_improvement = bool(
                self.BARE_INTERVAL_CODE.match(info.title) or self.BARE_KEYWORD.match(info.title)
            )

        logger.debug(
            f"Title '{info.title}' ({info.source}), cap={info.time_cap}, "
            f"interval={info.interval_period}, sets={info.sets_info}"
        )
        return info

    def _select(self, lines: List[GridLine]) -> Tuple[int, TitleSource]:
        for i, line in enumerate(lines):
            if line.label == LineLabel.AI_TITLE:
                return i, 'ai'
        for i, line in enumerate(lines):
            if line.label == LineLabel.TITLE:
                return i, 'labeled'
        return 0, 'positional'

    @staticmethod
    def clean(text: str) -> str:
        """Strip pipe debris, collapse whitespace, undo the '£' -> 'E' misread"""
        text = text.replace("|", " ")
        text = " ".join(text.split())
        # "Â£" is the UTF-8 mojibake of "£"
        return text.replace("Â£", "E").replace("£", "E")

    def _mine(self, title: str, info: TitleInfo, fill_only: bool = False):
        if info.time_cap is None or not fill_only:
            time_cap = self.parse_time_cap(title)
            if time_cap is not None:
                info.time_cap = time_cap

        if info.interval_period is None or not fill_only:
            period = self.parse_interval_period(title)
            if period is not None:
                info.interval_period = period

        if info.sets_info is None or not fill_only:
            match = self.SETS_ROUNDS_PATTERN.search(title)
            if match:
                info.sets_info = SetsInfo(sets=int(match.group(1)), rounds=int(match.group(2)))

    def parse_time_cap(self, title: str) -> Optional[int]:
        """'15 min cap' -> 900, '11:00 CAP' -> 660"""
        match = self.TIME_CAP_MINUTES_PATTERN.search(title)
        if match:
            return int(match.group(1)) * 60
        match = self.TIME_CAP_CLOCK_PATTERN.search(title)
        if match:
            return int(match.group(1)) * 60 + int(match.group(2))
        return None

    def parse_interval_period(self, title: str) -> Optional[int]:
        """'E5MOM' -> 5, '5 min EMOM' -> 5, 'EMOM' -> 1"""
        match = self.INTERVAL_CODE_PATTERN.search(title) or self.INTERVAL_PHRASE_PATTERN.search(title)
        if match:
            return int(match.group(1))
        if "emom" in title.lower():
            return 1
        return None
