"""Configuration sections holding per-gauge parameter sets and calibration ranges."""

from __future__ import annotations

import re
from typing import Any, Generic, Iterator, Mapping, Optional, Protocol, Sequence, TypeVar

_FLOAT = r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)"
_LEADING_FLOAT = re.compile(r"\s*(" + _FLOAT + ")", re.IGNORECASE)
_CALI_VALUES = re.compile(
    r"\s*(" + _FLOAT + r")(?:,\s*(" + _FLOAT + r")(?:,\s*(" + _FLOAT + r"))?)?",
    re.IGNORECASE,
)


class ConfigError(ValueError):
    """A configuration section received an invalid key or value."""


def _leading_float(text: str) -> float:
    """Parse the number at the start of text; 0.0 when there is none."""
    match = _LEADING_FLOAT.match(text)
    return float(match.group(1)) if match else 0.0


def _parse_cali_values(text: str) -> tuple[int, float, float, float]:
    """Parse "min,max[,init]"; return how many values were read and the values."""
    match = _CALI_VALUES.match(text)
    if not match:
        return 0, 0.0, 0.0, 0.0
    found = [g for g in match.groups() if g is not None]
    values = [float(v) for v in found] + [0.0] * (3 - len(found))
    return len(found), values[0], values[1], values[2]


def _find_name(key: str, names: Sequence[str]) -> Optional[int]:
    lowered = key.lower()
    for i, name in enumerate(names):
        if name.lower() == lowered:
            return i
    return None


def _lookup_gauge(gauges: Mapping[str, Any], value: str) -> Any:
    name = value.lower()
    if name not in gauges:
        raise ConfigError(f'Unknown gauge "{name}" in parameter set!')
    return gauges[name]


class ParamSetSection:
    """Parameter values given gauge by gauge, plus optional parameter grid files.

    A "gauge" key starts a new gauge; the parameters that follow belong to it
    and every parameter must be given before the next gauge or validation.
    """

    def __init__(
        self,
        name: str,
        param_names: Sequence[str],
        grid_names: Sequence[str],
        gauges: Mapping[str, Any],
    ) -> None:
        if len(grid_names) != len(param_names):
            raise ValueError("every parameter needs exactly one grid name")
        self.name = name
        self.param_names = tuple(param_names)
        self.grid_names = tuple(grid_names)
        self.gauges = gauges
        self.param_settings: dict[Any, list[float]] = {}
        self.param_grids: list[str] = [""] * len(self.param_names)
        self._current_gauge: Any = None
        self._current_params: list[Optional[float]] = []

    def _commit_current(self) -> None:
        if self._current_gauge is None:
            return
        for name, value in zip(self.param_names, self._current_params):
            if value is None:
                raise ConfigError(
                    f'Incomplete parameter set! Parameter "{name}" was not given a value.'
                )
        self.param_settings.setdefault(
            self._current_gauge, [float(v) for v in self._current_params]
        )
        self._current_gauge = None
        self._current_params = []

    def process_key_value(self, key: str, value: str) -> None:
        """Apply one key of the section; raise ConfigError when it is invalid."""
        if key.lower() == "gauge":
            gauge = _lookup_gauge(self.gauges, value)
            self._commit_current()
            if gauge in self.param_settings:
                raise ConfigError(f'Duplicate gauge "{value.lower()}" in parameter set!')
            self._current_gauge = gauge
            self._current_params = [None] * len(self.param_names)
            return

        grid_index = _find_name(key, self.grid_names)
        if grid_index is not None:
            self.param_grids[grid_index] = value
            return

        if self._current_gauge is None:
            raise ConfigError(f"Got parameter {key} without a gauge being set!")

        index = _find_name(key, self.param_names)
        if index is None:
            raise ConfigError(f'Unknown parameter name "{key}".')
        if self._current_params[index] is not None:
            raise ConfigError(f'Duplicate parameter "{key}" in parameter set!')
        self._current_params[index] = _leading_float(value)

    def validate(self) -> None:
        """Check the last gauge's parameters are complete and store them."""
        self._commit_current()


class CaliParamSection:
    """Calibration ranges (min, max, initial) of every parameter for one gauge."""

    def __init__(
        self, name: str, param_names: Sequence[str], gauges: Mapping[str, Any]
    ) -> None:
        self.name = name
        self.param_names = tuple(param_names)
        self.gauges = gauges
        self.gauge: Any = None
        count = len(self.param_names)
        self.param_mins: list[float] = [0.0] * count
        self.param_maxs: list[float] = [0.0] * count
        self.param_inits: list[float] = [0.0] * count
        self._set: list[bool] = [False] * count

    def process_key_value(self, key: str, value: str) -> None:
        """Apply one key of the section; raise ConfigError when it is invalid."""
        if key.lower() == "gauge":
            self.gauge = _lookup_gauge(self.gauges, value)
            return

        if self.gauge is None:
            raise ConfigError(f"Got parameter {key} without a gauge being set!")

        index = _find_name(key, self.param_names)
        if index is None:
            raise ConfigError(f'Unknown parameter name "{key}".')
        if self._set[index]:
            raise ConfigError(f'Duplicate parameter "{key}" in parameter set!')

        count, low, high, init = _parse_cali_values(value)
        if count < 2:
            raise ConfigError(f'Parameter "{key}" has invalid calibration values!')
        self.param_mins[index] = low
        self.param_maxs[index] = high
        self.param_inits[index] = init
        self._set[index] = True

    def validate(self) -> None:
        """Require a gauge and a range for every parameter."""
        if self.gauge is None:
            raise ConfigError(
                "The gauge on which calibration is to be performed was not set!"
            )
        for name, is_set in zip(self.param_names, self._set):
            if not is_set:
                raise ConfigError(
                    f'Incomplete parameter set! Parameter "{name}" was not given a value.'
                )


class _Named(Protocol):
    name: str


S = TypeVar("S", bound=_Named)


class SectionRegistry(Generic[S]):
    """Sections of one kind, keyed by their names."""

    def __init__(self) -> None:
        self._sections: dict[str, S] = {}

    def add(self, section: S) -> None:
        """Register a section; raise ConfigError if its name is already taken."""
        if self.is_duplicate(section.name):
            raise ConfigError(f'Duplicate section "{section.name}"!')
        self._sections[section.name] = section

    def is_duplicate(self, name: str) -> bool:
        """True when a section of this name is registered."""
        return name in self._sections

    def __getitem__(self, name: str) -> S:
        return self._sections[name]

    def __contains__(self, name: object) -> bool:
        return name in self._sections

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self) -> Iterator[str]:
        return iter(self._sections)