"""
Whiteboard parse endpoints

POST /parse/whiteboard for extractor lines (optionally labelled) and
POST /parse/whiteboard/text for a raw multi-line payload. Both return a
WorkoutExtraction.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from whiteboard_ingestor.models import WorkoutExtraction
from whiteboard_ingestor.parsers.whiteboard_parser import WhiteboardParser
from whiteboard_ingestor.services.movement_normalizer import MovementLexicon

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------


class ParseWhiteboardRequest(BaseModel):
    """Request model for POST /parse/whiteboard"""
    lines: List[str] = Field(..., max_length=500, description="Extractor lines, fields separated by '|'")
    labels: Optional[List[Optional[str]]] = Field(
        default=None,
        max_length=500,
        description="Optional per-line hints: TITLE, AITITLE, MOVEMENT, INSTRUCTION, SCORE",
    )
    token_confidences: Optional[List[float]] = Field(
        default=None,
        max_length=5000,
        description="Optional per-token recognition confidences (0-1 or 0-100)",
    )


class ParseWhiteboardTextRequest(BaseModel):
    """Request model for POST /parse/whiteboard/text"""
    text: str = Field(..., max_length=50000, description="Raw extractor output")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health")
def health():
    """Health check endpoint."""
    return {"ok": True}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


@router.post("/parse/whiteboard", response_model=WorkoutExtraction)
def parse_whiteboard(request: ParseWhiteboardRequest) -> WorkoutExtraction:
    """Parse extractor lines into a structured workout."""
    logger.info(f"Parsing whiteboard: {len(request.lines)} lines, labels={request.labels is not None}")
    return WhiteboardParser().parse(request.lines, request.labels, request.token_confidences)


@router.post("/parse/whiteboard/text", response_model=WorkoutExtraction)
def parse_whiteboard_text(request: ParseWhiteboardTextRequest) -> WorkoutExtraction:
    """Parse a raw multi-line payload into a structured workout."""
    logger.info(f"Parsing whiteboard text: {len(request.text)} chars")
    return WhiteboardParser().parse_text(request.text)


@router.get("/movements")
def list_movements():
    """Canonical movement names known to the alias lexicon."""
    lexicon = MovementLexicon.default()
    return {
        "version": lexicon.version,
        "total": len(lexicon),
        "movements": sorted(lexicon.canonical_names()),
    }
