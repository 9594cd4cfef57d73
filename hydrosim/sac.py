"""Sacramento soil moisture accounting for a single grid cell."""

from __future__ import annotations

import math
from dataclasses import astuple, dataclass, field, fields
from typing import Sequence

PARAM_NAMES = (
    "uztwm",
    "uzfwm",
    "uzk",
    "pctim",
    "adimp",
    "riva",
    "zperc",
    "rexp",
    "lztwm",
    "lzfsm",
    "lzfpm",
    "lzsk",
    "lzpk",
    "pfree",
    "side",
    "rserv",
    "adimc",
    "uztwc",
    "uzfwc",
    "lztwc",
    "lzfsc",
    "lzfpc",
)

STATE_NAMES = ("uztwc", "uzfwc", "lztwc", "lzfsc", "lzfpc", "adimc")


@dataclass
class SacParams:
    """Sacramento parameters.

    Capacities are in mm and depletion rates per day. The initial state
    entries uztwc to lzfpc are fractions of their storage capacity, while
    adimc is an initial depth in mm.
    """

    uztwm: float = 0.0
    uzfwm: float = 0.0
    uzk: float = 0.0
    pctim: float = 0.0
    adimp: float = 0.0
    riva: float = 0.0
    zperc: float = 0.0
    rexp: float = 0.0
    lztwm: float = 0.0
    lzfsm: float = 0.0
    lzfpm: float = 0.0
    lzsk: float = 0.0
    lzpk: float = 0.0
    pfree: float = 0.0
    side: float = 0.0
    rserv: float = 0.0
    adimc: float = 0.0
    uztwc: float = 0.0
    uzfwc: float = 0.0
    lztwc: float = 0.0
    lzfsc: float = 0.0
    lzfpc: float = 0.0

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "SacParams":
        """Build parameters from values in PARAM_NAMES order."""
        if len(values) < len(PARAM_NAMES):
            raise ValueError(
                f"expected {len(PARAM_NAMES)} SAC parameters, got {len(values)}"
            )
        return cls(*(float(v) for v in values[: len(PARAM_NAMES)]))

    def as_list(self) -> list[float]:
        """Values in PARAM_NAMES order."""
        return list(astuple(self))

    def scaled(self, factors: Sequence[float | None]) -> "SacParams":
        """Copy with each parameter multiplied by its factor; None leaves it as is."""
        values = self.as_list()
        for i, factor in enumerate(factors[: len(values)]):
            if factor is not None:
                values[i] *= factor
        return SacParams(*values)


@dataclass
class SacCell:
    """Storages (mm) and last step's fast and slow discharge of one cell."""

    params: SacParams = field(default_factory=SacParams)
    uztwc: float = 0.0
    uzfwc: float = 0.0
    lztwc: float = 0.0
    lzfsc: float = 0.0
    lzfpc: float = 0.0
    adimc: float = 0.0
    discharge_f: float = 0.0
    discharge_s: float = 0.0

    @classmethod
    def from_params(cls, params: SacParams) -> "SacCell":
        """A cell whose storages start at the parameters' initial states."""
        return cls(
            params=params,
            uztwc=params.uztwc * params.uztwm,
            uzfwc=params.uzfwc * params.uzfwm,
            lztwc=params.lztwc * params.lztwm,
            lzfsc=params.lzfsc * params.lzfsm,
            lzfpc=params.lzfpc * params.lzfpm,
            adimc=params.adimc,
        )

    def states(self) -> dict[str, float]:
        """Current storages by name."""
        return {name: getattr(self, name) for name in STATE_NAMES}


def _div(a: float, b: float) -> float:
    """Division following IEEE rules instead of raising on a zero divisor."""
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


def water_balance_cell(
    cell: SacCell, step_hours: float, precip_rate: float, pet_rate: float
) -> tuple[float, float]:
    """Advance one cell by one time step.

    precip_rate and pet_rate are in mm/h. The cell's storages are updated in
    place and (surface, ground) runoff in mm for the step is returned; the
    same values are kept as discharge_f and discharge_s.
    """
    p = cell.params
    precip = precip_rate * step_hours
    pet = pet_rate * step_hours
    dt = step_hours / 24.0
    parea = 1.0 - p.pctim - p.adimp
    tension_cap = p.uztwm + p.lztwm

    # Evapotranspiration
    e2 = 0.0
    e1 = pet * _div(cell.uztwc, p.uztwm)
    red = pet - e1
    cell.uztwc -= e1
    if cell.uztwc < 0.0:
        e1 += cell.uztwc
        cell.uztwc = 0.0
        red = pet - e1
        if cell.uzfwc < red:
            e2 = cell.uzfwc
            cell.uzfwc = 0.0
            red -= e2
        else:
            e2 = red
            cell.uzfwc -= e2
            red = 0.0

    if _div(cell.uztwc, p.uztwm) < _div(cell.uzfwc, p.uzfwm):
        uzrat = _div(cell.uztwc + cell.uzfwc, p.uztwm + p.uzfwm)
        cell.uztwc = p.uztwm * uzrat
        cell.uzfwc = p.uzfwm * uzrat

    if cell.uztwc < 0.00001:
        cell.uztwc = 0.0
    if cell.uzfwc < 0.00001:
        cell.uzfwc = 0.0

    e3 = red * _div(cell.lztwc, tension_cap)
    cell.lztwc -= e3
    if cell.lztwc < 0.0:
        e3 += cell.lztwc
        cell.lztwc = 0.0

    ratlzt = _div(cell.lztwc, p.lztwm)
    ratlz = _div(
        cell.lztwc + cell.lzfpc + cell.lzfsc - p.rserv,
        p.lztwm + p.lzfpm + p.lzfsm - p.rserv,
    )
    if ratlzt < ratlz:
        delta = (ratlz - ratlzt) * p.lztwm
        cell.lztwc += delta
        cell.lzfsc -= delta
        if cell.lzfsc < 0.0:
            cell.lzfpc += cell.lzfsc
            cell.lzfsc = 0.0

    if cell.lztwc < 0.00001:
        cell.lztwc = 0.0

    e5 = e1 + (red + e2) * _div(cell.adimc - e1 - cell.uztwc, tension_cap)
    cell.adimc -= e5
    if cell.adimc < 0.0:
        cell.adimc = 0.0

    # Percolation and runoff
    twx = precip + cell.uztwc - p.uztwm
    if twx < 0.0:
        cell.uztwc += precip
        twx = 0.0
    else:
        cell.uztwc = p.uztwm

    cell.adimc = cell.adimc + precip - twx
    roimp = precip * p.pctim

    sbf = ssur = sif = sdro = spbf = 0.0

    raw_ninc = 1.0 + 0.2 * (cell.uzfwc + twx)
    if math.isfinite(raw_ninc):
        ninc = float(math.floor(raw_ninc))
        steps = max(int(ninc), 0)
    else:
        ninc = raw_ninc
        steps = 0
    dinc = _div(1.0, ninc) * dt
    pinc = _div(twx, ninc)

    duz = 1.0 - _pow(1.0 - p.uzk, dinc)
    dlzp = 1.0 - _pow(1.0 - p.lzpk, dinc)
    dlzs = 1.0 - _pow(1.0 - p.lzsk, dinc)

    for _ in range(steps):
        adsur = 0.0
        ratio = _div(cell.adimc - cell.uztwc, p.lztwm)
        if ratio < 0.0:
            ratio = 0.0
        addro = pinc * _pow(ratio, 2.0)

        bf = cell.lzfpc * dlzp
        cell.lzfpc -= bf
        if cell.lzfpc <= 0.0001:
            bf += cell.lzfpc
            cell.lzfpc = 0.0
        sbf += bf
        spbf += bf

        bf = cell.lzfsc * dlzs
        cell.lzfsc -= bf
        if cell.lzfsc <= 0.0001:
            bf += cell.lzfsc
            cell.lzfsc = 0.0
        sbf += bf

        if pinc + cell.uzfwc <= 0.01:
            cell.adimc = cell.adimc + pinc - addro - adsur
            if cell.adimc > tension_cap:
                addro = addro + cell.adimc - tension_cap
                cell.adimc = tension_cap
            sdro += addro * p.adimp
            if cell.adimc < 0.00001:
                cell.adimc = 0.0
            continue

        percm = p.lzfpm * dlzp + p.lzfsm * dlzs
        perc = percm * _div(cell.uzfwc, p.uzfwm)
        defr = 1.0 - _div(
            cell.lztwc + cell.lzfpc + cell.lzfsc, p.lztwm + p.lzfpm + p.lzfsm
        )
        perc = perc * (1.0 + p.zperc * _pow(defr, p.rexp))
        if perc >= cell.uzfwc:
            perc = cell.uzfwc
        cell.uzfwc -= perc

        check = (
            cell.lztwc + cell.lzfpc + cell.lzfsc + perc - p.lztwm - p.lzfpm - p.lzfsm
        )
        if check > 0.0:
            perc -= check
            cell.uzfwc += check

        # Interflow
        delta = cell.uzfwc * duz
        sif += delta
        cell.uzfwc -= delta

        perct = perc * (1.0 - p.pfree)
        if perct + cell.lztwc <= p.lztwm:
            cell.lztwc += perct
            percf = 0.0
        else:
            percf = perct + cell.lztwc - p.lztwm
            cell.lztwc = p.lztwm

        percf += perc * p.pfree
        if percf != 0.0:
            hpl = _div(p.lzfpm, p.lzfpm + p.lzfsm)
            ratlp = _div(cell.lzfpc, p.lzfpm)
            ratls = _div(cell.lzfsc, p.lzfsm)
            fracp = _div(hpl * 2.0 * (1.0 - ratlp), (1.0 - ratlp) + (1.0 - ratls))
            if fracp > 1.0:
                fracp = 1.0
            percp = percf * fracp
            percs = percf - percp

            cell.lzfsc += percs
            if cell.lzfsc > p.lzfsm:
                percs = percs - cell.lzfsc + p.lzfsm
                cell.lzfsc = p.lzfsm

            cell.lzfpc = cell.lzfpc + percf - percs
            if cell.lzfpc > p.lzfpm:
                cell.lztwc += cell.lzfpc - p.lzfpm
                cell.lzfpc = p.lzfpm

        if pinc != 0.0:
            if pinc + cell.uzfwc <= p.uzfwm:
                cell.uzfwc += pinc
            else:
                sur = pinc + cell.uzfwc - p.uzfwm
                ssur += sur * parea
                adsur = sur * (1.0 - addro / pinc)
                ssur += adsur * p.adimp

        cell.adimc = cell.adimc + pinc - addro - adsur
        if cell.adimc > tension_cap:
            addro = addro + cell.adimc - tension_cap
            cell.adimc = tension_cap
        sdro += addro * p.adimp
        if cell.adimc < 0.00001:
            cell.adimc = 0.0

    eused = e1 + e2 + e3
    sif *= parea
    tbf = sbf * parea
    bfcc = tbf * _div(1.0, 1.0 + p.side)

    tci = roimp + sdro + ssur + sif + bfcc
    grnd = sif + bfcc
    surf = tci - grnd

    e4 = (pet - eused) * p.riva
    tci -= e4
    if tci < 0.0:
        e4 += tci
        tci = 0.0

    grnd -= e4
    if grnd < 0.0:
        surf += grnd
        grnd = 0.0
        if surf < 0.0:
            surf = 0.0

    if cell.adimc < cell.uztwc:
        cell.adimc = cell.uztwc

    cell.discharge_f = surf
    cell.discharge_s = grnd
    return surf, grnd


__all__ = [
    "PARAM_NAMES",
    "STATE_NAMES",
    "SacParams",
    "SacCell",
    "water_balance_cell",
]

_ = fields  # dataclass helpers kept available for callers introspecting params