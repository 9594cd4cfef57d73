"""Float grids, grid nodes, the TRMM daily binary reader and ASCII grid output."""

from __future__ import annotations

import gzip
import math
import sys
from array import array
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

TRMMD_COLS = 1440
TRMMD_ROWS = 400
TRMMD_CELL_SIZE = 0.25
TRMMD_BOTTOM = -50.0
TRMMD_LEFT = -180.0


@dataclass(frozen=True)
class GridLoc:
    """Column (x) and row (y) indices of a cell in a grid."""

    x: int
    y: int


@dataclass
class GridNode:
    """A modelled cell: its indices in the DEM and its geographic reference point."""

    x: int
    y: int
    ref_x: float = 0.0
    ref_y: float = 0.0
    index: int = 0
    gauge: Any = None
    downstream: Optional[int] = None
    channel_cell: bool = False
    area: float = 0.0
    contrib_area: float = 0.0


@dataclass
class FloatGrid:
    """A north-up raster of floats; row 0 is the northern edge."""

    num_cols: int
    num_rows: int
    cell_size: float
    left: float
    bottom: float
    no_data: float = -9999.0
    data: list[list[float]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.data:
            self.data = [[0.0] * self.num_cols for _ in range(self.num_rows)]

    @property
    def top(self) -> float:
        return self.bottom + self.num_rows * self.cell_size

    @property
    def right(self) -> float:
        return self.left + self.num_cols * self.cell_size

    def get_grid_loc(self, x: float, y: float) -> Optional[GridLoc]:
        """Return the cell holding the point (x, y), or None when it lies outside."""
        col = math.floor((x - self.left) / self.cell_size)
        row = math.floor((self.top - y) / self.cell_size)
        if 0 <= col < self.num_cols and 0 <= row < self.num_rows:
            return GridLoc(col, row)
        return None

    def is_spatial_match(self, other: "FloatGrid") -> bool:
        """True when both grids share shape, cell size and extent."""
        return (
            self.num_cols == other.num_cols
            and self.num_rows == other.num_rows
            and math.isclose(self.cell_size, other.cell_size, rel_tol=1e-9, abs_tol=1e-12)
            and math.isclose(self.left, other.left, rel_tol=1e-9, abs_tol=1e-9)
            and math.isclose(self.bottom, other.bottom, rel_tol=1e-9, abs_tol=1e-9)
        )


def read_trmmd_grid(path: str | Path) -> FloatGrid:
    """Read a gzipped TRMM daily file of big-endian float32 rows, south first.

    Rows are flipped so that row 0 is north, and the two halves of each row are
    swapped so that the grid starts at 180 degrees west.
    """
    grid = FloatGrid(
        num_cols=TRMMD_COLS,
        num_rows=TRMMD_ROWS,
        cell_size=TRMMD_CELL_SIZE,
        left=TRMMD_LEFT,
        bottom=TRMMD_BOTTOM,
    )
    row_bytes = 4 * TRMMD_COLS
    half = TRMMD_COLS // 2
    with gzip.open(path, "rb") as handle:
        for i in range(TRMMD_ROWS):
            raw = handle.read(row_bytes)
            if len(raw) != row_bytes:
                raise ValueError(f"TRMM Daily file {path} corrupt?")
            values = array("f")
            values.frombytes(raw)
            if sys.byteorder == "little":
                values.byteswap()
            row = values.tolist()
            grid.data[TRMMD_ROWS - 1 - i] = row[half:] + row[:half]
    return grid


def _format_value(value: float) -> str:
    return f"{value:g}"


def write_asc_grid(path: str | Path, grid: FloatGrid) -> None:
    """Write a grid in the ESRI ASCII raster format."""
    lines = [
        f"ncols {grid.num_cols}",
        f"nrows {grid.num_rows}",
        f"xllcorner {_format_value(grid.left)}",
        f"yllcorner {_format_value(grid.bottom)}",
        f"cellsize {_format_value(grid.cell_size)}",
        f"NODATA_value {_format_value(grid.no_data)}",
    ]
    lines.extend(" ".join(_format_value(v) for v in row) for row in grid.data)
    Path(path).write_text("\n".join(lines) + "\n", encoding="ascii")


def sample_to_nodes(
    grid: FloatGrid,
    nodes: Sequence[GridNode] | Iterable[GridNode],
    dem: FloatGrid,
    scale: float = 1.0,
    positive_only: bool = False,
) -> list[float]:
    """Take the grid's value under each node, scaled; missing values become 0.

    When the grid matches the DEM the node's indices are used directly,
    otherwise the node's reference point is located in the grid.
    """
    exact = dem.is_spatial_match(grid)
    result = []
    for node in nodes:
        if exact:
            value = grid.data[node.y][node.x]
        else:
            loc = grid.get_grid_loc(node.ref_x, node.ref_y)
            if loc is None:
                result.append(0.0)
                continue
            value = grid.data[loc.y][loc.x]
        if value != grid.no_data and (not positive_only or value > 0.0):
            result.append(value * scale)
        else:
            result.append(0.0)
    return result