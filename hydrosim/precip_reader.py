"""Reading precipitation grids onto model nodes, with caching of the last file."""

from __future__ import annotations

from typing import Callable, Mapping, Optional, Sequence

from hydrosim.grid import FloatGrid, GridNode, sample_to_nodes
from hydrosim.precip_type import PrecipType

GridLoader = Callable[[str], Optional[FloatGrid]]


class PrecipReader:
    """Reads precipitation files through per-format loaders.

    A loader takes a path and returns a FloatGrid, or None (or raises OSError)
    when the file is missing.
    """

    def __init__(self, loaders: Mapping[PrecipType, GridLoader], dem: FloatGrid) -> None:
        self.loaders = dict(loaders)
        self.dem = dem
        self._last_file: Optional[str] = None
        self._values: list[float] = []

    def read(
        self,
        path: str,
        precip_type: PrecipType,
        nodes: Sequence[GridNode],
        precip_convert: float,
        previous: Optional[Sequence[float]] = None,
        has_qpf: bool = False,
    ) -> tuple[bool, list[float]]:
        """Return (found, values) for the nodes.

        Reading the same file as last time returns the previous values again.
        A missing file gives zeros unless forecast precipitation is available,
        in which case the earlier values are kept and the file is retried later.
        """
        if not self._values or len(self._values) != len(nodes):
            self._values = [0.0] * len(nodes)

        if path == self._last_file:
            if previous is not None:
                self._values = list(previous[: len(nodes)])
            return True, list(self._values)

        loader = self.loaders.get(precip_type)
        if loader is None:
            raise ValueError(f"Unsupported precip format {precip_type!r}")

        if not has_qpf:
            self._last_file = path

        try:
            grid = loader(path)
        except OSError:
            grid = None

        if grid is None:
            if not has_qpf:
                self._values = [0.0] * len(nodes)
            return False, list(self._values)

        if has_qpf:
            self._last_file = path

        self._values = sample_to_nodes(grid, nodes, self.dem, precip_convert, True)
        return True, list(self._values)