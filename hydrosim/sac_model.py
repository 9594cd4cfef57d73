"""Distributed Sacramento water balance over a set of grid nodes."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from hydrosim.grid import FloatGrid, GridNode
from hydrosim.sac import (
    PARAM_NAMES,
    STATE_NAMES,
    SacCell,
    SacParams,
    water_balance_cell,
)

logger = logging.getLogger(__name__)

GridWriter = Callable[[Sequence[GridNode], Sequence[float], str], Any]
GridReader = Callable[[str], Optional[FloatGrid]]
ParamValues = Union[SacParams, Sequence[float]]


@dataclass
class WaterBalanceOutput:
    """Per-node results of one water balance step.

    fast_flow, slow_flow and base_flow are runoff rates (mm/s) produced this
    step, meant to be added to the routing inputs. soil_moisture is the upper
    zone fullness in percent. Nodes without a gauge get zeros everywhere.
    """

    fast_flow: list[float]
    slow_flow: list[float]
    base_flow: list[float]
    soil_moisture: list[float]
    groundwater: list[float]


def _as_params(value: ParamValues) -> SacParams:
    if isinstance(value, SacParams):
        return SacParams(*value.as_list())
    return SacParams.from_sequence(value)


def _grid_factor(grid: FloatGrid, node: GridNode) -> Optional[float]:
    loc = grid.get_grid_loc(node.ref_x, node.ref_y)
    if loc is None:
        return None
    value = grid.data[loc.y][loc.x]
    if value == grid.no_data:
        return None
    return value


def _soil_moisture(cell: SacCell) -> float:
    capacity = cell.params.uztwm + cell.params.uzfwm
    content = cell.uztwc + cell.uzfwc
    if capacity == 0.0:
        return 0.0
    value = 100.0 * content / capacity
    return value if math.isfinite(value) else 0.0


class SacModel:
    """The Sacramento model run cell by cell over the modelled nodes."""

    name = "sac"
    is_lumped = False

    def __init__(self) -> None:
        self.nodes: list[GridNode] = []
        self.cells: list[SacCell] = []

    def initialize(
        self,
        nodes: Sequence[GridNode],
        param_settings: Mapping[Any, ParamValues],
        param_grids: Sequence[Optional[FloatGrid]],
    ) -> None:
        """Give every gauged node its parameters and initial storages.

        Storages are set from the gauge's parameters before the parameter
        grids scale them; a grid value of no-data, or a node outside the
        grid, leaves that parameter unscaled.
        """
        self.nodes = list(nodes)
        if len(self.cells) != len(self.nodes):
            self.cells = [SacCell() for _ in self.nodes]

        grids = list(param_grids[: len(PARAM_NAMES)])
        for i, node in enumerate(self.nodes):
            if node.gauge is None:
                continue
            base = _as_params(param_settings[node.gauge])
            cell = SacCell.from_params(base)
            factors = [
                _grid_factor(grid, node) if grid is not None else None for grid in grids
            ]
            cell.params = base.scaled(factors)
            self.cells[i] = cell

    def water_balance(
        self, step_hours: float, precip: Sequence[float], pet: Sequence[float]
    ) -> WaterBalanceOutput:
        """Advance every gauged node one step with precip and PET in mm/h."""
        count = len(self.nodes)
        if len(precip) != count or len(pet) != count:
            raise ValueError(
                f"expected {count} precip and PET values, got {len(precip)} and {len(pet)}"
            )
        seconds = step_hours * 3600.0
        fast = [0.0] * count
        slow = [0.0] * count
        base = [0.0] * count
        moisture = [0.0] * count
        groundwater = [0.0] * count

        for i, (node, cell, p, e) in enumerate(zip(self.nodes, self.cells, precip, pet)):
            if node.gauge is None:
                continue
            surface, ground = water_balance_cell(cell, step_hours, p, e)
            fast[i] = surface / seconds
            slow[i] = ground / seconds
            base[i] = ground / seconds
            moisture[i] = _soil_moisture(cell)

        return WaterBalanceOutput(fast, slow, base, moisture, groundwater)

    def state_values(self) -> dict[str, list[float]]:
        """Every storage, by name, as a list over the nodes."""
        return {
            name: [getattr(cell, name) for cell in self.cells] for name in STATE_NAMES
        }

    def load_state_values(self, name: str, values: Sequence[Optional[float]]) -> None:
        """Set one storage on every node; None entries leave a node unchanged."""
        if name not in STATE_NAMES:
            raise KeyError(name)
        if len(values) != len(self.cells):
            raise ValueError(
                f"expected {len(self.cells)} values for {name}, got {len(values)}"
            )
        for cell, value in zip(self.cells, values):
            if value is not None:
                setattr(cell, name, float(value))

    @staticmethod
    def _state_file(state_path: str, name: str, time_text: str) -> str:
        return f"{state_path}/{name}_{time_text}.tif"

    def save_states(self, state_path: str, time_text: str, writer: GridWriter) -> list[str]:
        """Hand each storage to writer(nodes, values, path); return the paths used."""
        paths = []
        for name, values in self.state_values().items():
            path = self._state_file(state_path, name, time_text)
            writer(self.nodes, values, path)
            paths.append(path)
        return paths

    def load_states(
        self, state_path: str, time_text: str, reader: GridReader, dem: FloatGrid
    ) -> list[str]:
        """Load saved storage grids that match the DEM; return the names loaded.

        Missing grids and grids that do not match the DEM are skipped, as are
        no-data cells within a loaded grid.
        """
        loaded = []
        for name in STATE_NAMES:
            path = self._state_file(state_path, name, time_text)
            try:
                grid = reader(path)
            except OSError:
                grid = None
            if grid is None:
                logger.info("Previous %s grid %s not found!", name.upper(), path)
                continue
            if not dem.is_spatial_match(grid):
                logger.info(
                    "Previous %s grid %s not a spatial match!", name.upper(), path
                )
                continue
            logger.info("Using previous %s grid %s", name.upper(), path)
            values = []
            for node in self.nodes:
                value = grid.data[node.y][node.x]
                values.append(None if value == grid.no_data else value)
            self.load_state_values(name, values)
            loaded.append(name)
        return loaded