# discovery/utils/location_text.py
from typing import List, Optional


def split_segments(text: Optional[str]) -> List[str]:
    """Lowercased, trimmed, non-empty comma-delimited segments."""
    if not text:
        return []
    return [part.strip() for part in text.lower().split(",") if part.strip()]


def normalize_label(text: Optional[str]) -> str:
    """'  Austin ,TX ' -> 'austin, tx'"""
    return ", ".join(split_segments(text))


def city_token(text: Optional[str]) -> str:
    """First segment of a normalized location string, treated as the city."""
    segments = split_segments(text)
    return segments[0] if segments else ""


def region_token(text: Optional[str]) -> str:
    segments = split_segments(text)
    return segments[1] if len(segments) > 1 else ""
