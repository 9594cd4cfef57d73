"""Supported precipitation input formats."""

from __future__ import annotations

from enum import Enum


class PrecipType(Enum):
    """Precipitation file formats, valued by their configuration names."""

    ASCII = "asc"
    MRMS = "mrms"
    TRMMRT = "trmmrt"
    TRMMV7 = "trmmv7"
    BIF = "bif"
    TIF = "tif"


def parse_precip_type(text: str) -> PrecipType:
    """Return the format named by text, ignoring case; raise ValueError if unknown."""
    lowered = text.lower()
    for kind in PrecipType:
        if kind.value == lowered:
            return kind
    raise ValueError(f"Unknown precip type {text!r}; expected one of {precip_type_names()}")


def precip_type_names() -> str:
    """Comma separated list of the accepted format names."""
    return ", ".join(kind.value.upper() for kind in PrecipType)