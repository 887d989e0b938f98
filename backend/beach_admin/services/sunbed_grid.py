"""
Sunbed grid generation and layout normalization.

Pure functions, no database access. A zone's default layout is a rectangular
grid; every bed gets a code derived from its position so the same (row, col)
always maps to the same label.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from beach_admin.core.exceptions import BadRequestError
from beach_admin.models.zone import SunbedStatus


@dataclass(frozen=True)
class SunbedSpec:
    """Initial values for one sunbed row."""

    row: int
    col: int
    code: str
    status: str = SunbedStatus.AVAILABLE.value
    price_modifier: float = 0
    id: Optional[int] = None


def sunbed_code(row: int, col: int, zone_id: Optional[int] = None) -> str:
    if zone_id is None:
        return f"R{row}C{col}"
    return f"Z{zone_id}-R{row}C{col}"


def generate_sunbed_grid(rows: int, cols: int, zone_id: Optional[int] = None) -> list[SunbedSpec]:
    """Row-major grid of available beds; an empty grid is valid."""
    if rows < 0 or cols < 0:
        raise BadRequestError("Zone rows and cols must be non-negative")
    return [
        SunbedSpec(row=r, col=c, code=sunbed_code(r, c, zone_id))
        for r in range(1, rows + 1)
        for c in range(1, cols + 1)
    ]


def normalize_sunbed_layout(entries: Iterable, zone_id: Optional[int] = None) -> list[SunbedSpec]:
    """Fill defaults into an explicit layout and reject duplicate codes.

    `entries` are objects with row/col/code/status/price_modifier/id
    attributes (the request schema).
    """
    specs = []
    seen_codes = set()
    for entry in entries:
        code = entry.code or sunbed_code(entry.row, entry.col, zone_id)
        if code in seen_codes:
            raise BadRequestError(f"Duplicate sunbed code {code}")
        seen_codes.add(code)
        status = entry.status or SunbedStatus.AVAILABLE
        specs.append(
            SunbedSpec(
                row=entry.row,
                col=entry.col,
                code=code,
                status=SunbedStatus(status).value,
                price_modifier=entry.price_modifier or 0,
                id=entry.id,
            )
        )
    return specs


def unique_code(code: str, used: set) -> str:
    """`code`, or `code-2`, `code-3`, ... if it is already taken in the zone."""
    candidate, n = code, 1
    while candidate in used:
        n += 1
        candidate = f"{code}-{n}"
    return candidate
