"""Clip a TRMM daily grid to a bounding box and write it as an ASCII grid."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from hydrosim.grid import FloatGrid, read_trmmd_grid, write_asc_grid

CLIP_CELL_SIZE = 0.25
CLIP_NO_DATA = -999.0

USAGE = (
    "Use this program as TRMMDClip <input_filename> <output_filename> "
    "<top> <bottom> <left> <right>"
)


def snap_to_quarter(value: float) -> float:
    """Truncate a coordinate toward zero onto the 0.25 degree lattice."""
    return CLIP_CELL_SIZE * int(value / CLIP_CELL_SIZE)


def validate_bounds(top: float, bottom: float, left: float, right: float) -> None:
    """Raise ValueError when the box lies outside the TRMM coverage or is empty."""
    if top > 50.0 or top < -50.0 or top <= bottom:
        raise ValueError("Top must be between 60 & -60 and > Bottom")
    if bottom > 50.0 or bottom < -50.0:
        raise ValueError("Bottom must be between 60 & -60")
    if left < -180.0 or left > 180.0 or left >= right:
        raise ValueError("Left must be between -180 & 180 and must be < Right")
    if right < -180.0 or right > 180.0:
        raise ValueError("Right must be between -180 & 180")


def clip_grid(source: FloatGrid, top: float, bottom: float, left: float, right: float) -> FloatGrid:
    """Copy the quarter-degree box given by the bounds out of the source grid."""
    num_cols = int((right - left) / CLIP_CELL_SIZE)
    num_rows = int((top - bottom) / CLIP_CELL_SIZE)
    out = FloatGrid(
        num_cols=num_cols,
        num_rows=num_rows,
        cell_size=CLIP_CELL_SIZE,
        left=left,
        bottom=bottom,
        no_data=CLIP_NO_DATA,
    )
    real_top = int((source.top - out.top) / CLIP_CELL_SIZE)
    real_left = int((out.left - source.left) / CLIP_CELL_SIZE)
    out.data = [
        list(source.data[real_top + row][real_left:real_left + num_cols])
        for row in range(num_rows)
    ]
    return out


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the clipper; returns 1 when a clip was written and 0 otherwise."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) not in (2, 6):
        print(USAGE)
        return 0

    filename, output = args[0], args[1]
    top, bottom, left, right = 50.0, -50.0, -180.0, 180.0
    if len(args) == 6:
        try:
            top, bottom, left, right = (float(v) for v in args[2:6])
        except ValueError:
            print(USAGE)
            return 0

    top, bottom, left, right = (snap_to_quarter(v) for v in (top, bottom, left, right))
    try:
        validate_bounds(top, bottom, left, right)
    except ValueError as exc:
        print(exc)
        return 0

    try:
        source = read_trmmd_grid(filename)
    except (OSError, ValueError, EOFError):
        print(f"Failed to open file {filename}")
        return 0

    real_top = int((source.top - top) / CLIP_CELL_SIZE)
    real_left = int((left - source.left) / CLIP_CELL_SIZE)
    print(f"Real top is {real_top}, left is {real_left}")

    write_asc_grid(output, clip_grid(source, top, bottom, left, right))
    return 1


if __name__ == "__main__":
    sys.exit(0 if main() else 1)