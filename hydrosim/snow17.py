"""The Snow-17 snow accumulation and ablation model."""

from __future__ import annotations

import math
from dataclasses import astuple, dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union

from hydrosim.grid import FloatGrid, GridNode

PARAM_NAMES = ("uadj", "mbase", "mfmax", "mfmin", "tipm", "nmf", "plwhc", "scf")

STATE_NAMES = ("ati", "wq", "wi", "deficit")

STEFAN = 6.12e-10
RAIN_TEMPERATURE = 1.0  # air temperature (C) at or above which precipitation is rain


@dataclass
class Snow17Params:
    """Snow-17 parameters.

    uadj: wind function for rain-on-snow melt; mbase: base melt temperature (C);
    mfmax, mfmin: seasonal melt factor extremes (mm/C per 6 h); tipm: antecedent
    temperature index weight; nmf: negative melt factor; plwhc: liquid water
    holding capacity (fraction of ice); scf: snowfall correction factor.
    """

    uadj: float = 0.0
    mbase: float = 0.0
    mfmax: float = 0.0
    mfmin: float = 0.0
    tipm: float = 0.0
    nmf: float = 0.0
    plwhc: float = 0.0
    scf: float = 0.0

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Snow17Params":
        """Build parameters from values in PARAM_NAMES order."""
        if len(values) < len(PARAM_NAMES):
            raise ValueError(
                f"expected {len(PARAM_NAMES)} Snow-17 parameters, got {len(values)}"
            )
        return cls(*(float(v) for v in values[: len(PARAM_NAMES)]))

    def as_list(self) -> list[float]:
        """Values in PARAM_NAMES order."""
        return list(astuple(self))


@dataclass
class Snow17Cell:
    """Snow pack state of one cell.

    ati is the antecedent temperature index (C), wq the liquid water and wi the
    ice content (mm), deficit the heat deficit (mm) and p_atm the atmospheric
    pressure (mb).
    """

    params: Snow17Params = field(default_factory=Snow17Params)
    ati: float = 0.0
    wq: float = 0.0
    wi: float = 0.0
    deficit: float = 0.0
    p_atm: float = 0.0

    def states(self) -> dict[str, float]:
        """Current states by name."""
        return {name: getattr(self, name) for name in STATE_NAMES}


def _div(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _pow(base: float, exponent: float) -> float:
    if base == 0.0 and exponent < 0.0:
        return math.inf
    try:
        return math.pow(base, exponent)
    except ValueError:
        return math.nan
    except OverflowError:
        return math.inf


def _exp(value: float) -> float:
    try:
        return math.exp(value)
    except OverflowError:
        return math.inf


def _fmax(a: float, b: float) -> float:
    """Larger of two values, ignoring a NaN argument."""
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return a if a > b else b


def atmospheric_pressure(elevation: float) -> float:
    """Atmospheric pressure (mb) at an elevation given in metres."""
    hundreds = elevation / 100.0
    return 33.86 * (29.9 - 0.335 * hundreds + 0.00022 * _pow(hundreds, 2.4))


def snow_balance_cell(
    cell: Snow17Cell, step_hours: float, jday: float, precip_rate: float, temp: float
) -> tuple[float, float]:
    """Advance one cell by one time step.

    precip_rate is in mm/h and temp in C. The cell's states are updated in
    place; returns (outflow rate in mm/h, snow water equivalent in mm).
    """
    p = cell.params
    tipm_dtt = 1.0 - _pow(1.0 - p.tipm, step_hours / 6.0)
    precip = precip_rate * step_hours

    seasonal = 0.5 * math.sin((jday - 81 * 2 * math.pi) / 366.0) + 0.5
    mf = (step_hours / 6.0) * (seasonal * (p.mfmax - p.mfmin) + p.mfmin)

    # Accumulation
    if temp < RAIN_TEMPERATURE:
        frac_rain, frac_snow = 0.0, 1.0
    else:
        frac_rain, frac_snow = 1.0, 0.0

    new_snow = precip * frac_snow * p.scf
    cell.wi += new_snow
    excess = 0.0
    rain = frac_rain * precip

    # Temperature and heat deficit of new snow
    t_snow_new = 0.0
    delta_hd_snow = 0.0
    t_rain = temp
    if temp < 0.0:
        t_snow_new = temp
        delta_hd_snow = -(t_snow_new * new_snow) / (80.0 / 0.5)
        t_rain = RAIN_TEMPERATURE

    # Antecedent temperature index
    if new_snow > 1.5 * step_hours:
        cell.ati = t_snow_new
    else:
        cell.ati = cell.ati + tipm_dtt * (temp - cell.ati)
    if cell.ati > 0.0:
        cell.ati = 0.0

    # Heat exchange when there is no surface melt
    delta_hd_t = (
        p.nmf * (step_hours / 6.0) * _div(mf, p.mfmax) * (cell.ati - t_snow_new)
    )

    # Rain-on-snow melt
    melt_ros = 0.0
    e_sat = 2.7489 * 100000000.0 * _exp(_div(-4278.63, temp + 242.792))
    if rain > 0.25 * step_hours:
        ros1 = _fmax(
            STEFAN * step_hours * (_pow(temp + 273.0, 4.0) - _pow(273.0, 4.0)), 0.0
        )
        ros2 = _fmax(0.0125 * rain * t_rain, 0.0)
        ros3 = _fmax(
            8.5
            * p.uadj
            * (step_hours / 6.0)
            * ((0.9 * e_sat - 6.11) + 0.00057 * cell.p_atm * temp),
            0.0,
        )
        melt_ros = ros1 + ros2 + ros3

    # Non-rain melt
    melt_nr = 0.0
    if rain <= 0.25 * step_hours and temp > p.mbase:
        melt_nr = mf * (temp - p.mbase) + 0.0125 * rain * t_rain

    # Ripeness of the snow cover
    melt = melt_ros + melt_nr
    if melt < 0.0:
        melt = 0.0

    if melt < cell.wi:
        cell.wi -= melt
    else:
        melt = cell.wi + cell.wq
        cell.wi = 0.0

    qw = melt + rain
    w_qx = p.plwhc * cell.wi
    cell.deficit = cell.deficit + delta_hd_snow + delta_hd_t

    if cell.deficit <= 0.0:
        cell.deficit = 0.0
    elif cell.deficit > 0.33 * cell.wi:
        cell.deficit = 0.33 * cell.wi

    if cell.wi > 0.0:
        if qw + cell.wq > cell.deficit * (1.0 + p.plwhc) + w_qx:
            # Ripe: excess liquid water leaves the pack
            excess = qw + cell.wq - w_qx - cell.deficit * (1.0 + p.plwhc)
            cell.wq = w_qx
            cell.wi += cell.deficit
            cell.deficit = 0.0
        elif qw >= cell.deficit:
            # Not yet ripe, but the deficit is satisfied
            excess = 0.0
            cell.wq = cell.wq + qw - cell.deficit
            cell.wi += cell.deficit
            cell.deficit = 0.0
        elif qw < cell.deficit:
            # Not ripe: all water refreezes
            excess = 0.0
            cell.wi += qw
            cell.deficit -= qw
        swe = cell.wi + cell.wq
    else:
        excess = qw
        swe = 0.0
        cell.wq = 0.0

    if cell.deficit == 0.0:
        cell.ati = 0.0

    return _div(excess, step_hours), swe


ParamValues = Union[Snow17Params, Sequence[float]]


def _as_params(value: ParamValues) -> Snow17Params:
    if isinstance(value, Snow17Params):
        return Snow17Params(*value.as_list())
    return Snow17Params.from_sequence(value)


def _param_factor(grid: FloatGrid, node: GridNode, dem: FloatGrid) -> Optional[float]:
    if dem.is_spatial_match(grid):
        row, col = node.y, node.x
    else:
        loc = grid.get_grid_loc(node.ref_x, node.ref_y)
        if loc is None:
            return None
        row, col = loc.y, loc.x
    if grid.data[row][col] == 0:
        grid.data[row][col] = 0.01
    return grid.data[row][col]


class Snow17Model:
    """Snow-17 run cell by cell over the modelled nodes."""

    name = "snow17"

    def __init__(self) -> None:
        self.nodes: list[GridNode] = []
        self.cells: list[Snow17Cell] = []

    def initialize(
        self,
        nodes: Sequence[GridNode],
        param_settings: Mapping[Any, ParamValues],
        param_grids: Sequence[Optional[FloatGrid]],
        dem: FloatGrid,
    ) -> None:
        """Clear all states, set pressures from the DEM and distribute parameters.

        A parameter grid value of zero is replaced in the grid by 0.01 before
        it scales the parameter.
        """
        self.nodes = list(nodes)
        if len(self.cells) != len(self.nodes):
            self.cells = [Snow17Cell() for _ in self.nodes]

        for node, cell in zip(self.nodes, self.cells):
            cell.p_atm = atmospheric_pressure(dem.data[node.y][node.x])
            for name in STATE_NAMES:
                setattr(cell, name, 0.0)

        grids = list(param_grids[: len(PARAM_NAMES)])
        for node, cell in zip(self.nodes, self.cells):
            if node.gauge is None:
                continue
            values = _as_params(param_settings[node.gauge]).as_list()
            for i, grid in enumerate(grids):
                if grid is None:
                    continue
                factor = _param_factor(grid, node, dem)
                if factor is not None:
                    values[i] *= factor
            cell.params = Snow17Params(*values)

    def snow_balance(
        self,
        jday: float,
        step_hours: float,
        precip: Sequence[float],
        temp: Sequence[float],
    ) -> tuple[list[float], list[float]]:
        """Advance every node one step; return (outflow rates in mm/h, SWE in mm)."""
        count = len(self.nodes)
        if len(precip) != count or len(temp) != count:
            raise ValueError(
                f"expected {count} precip and temperature values, "
                f"got {len(precip)} and {len(temp)}"
            )
        melt: list[float] = []
        swe: list[float] = []
        for cell, p, t in zip(self.cells, precip, temp):
            out, water = snow_balance_cell(cell, step_hours, jday, p, t)
            melt.append(out)
            swe.append(water)
        return melt, swe

    def state_values(self) -> dict[str, list[float]]:
        """Every state, by name, as a list over the nodes."""
        return {
            name: [getattr(cell, name) for cell in self.cells] for name in STATE_NAMES
        }

    def load_state_values(self, name: str, values: Sequence[Optional[float]]) -> None:
        """Set one state on every node; None entries leave a node unchanged."""
        if name not in STATE_NAMES:
            raise KeyError(name)
        if len(values) != len(self.cells):
            raise ValueError(
                f"expected {len(self.cells)} values for {name}, got {len(values)}"
            )
        for cell, value in zip(self.cells, values):
            if value is not None:
                setattr(cell, name, float(value))