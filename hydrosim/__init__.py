"""Components for distributed hydrologic simulation: grids, precipitation input, Sacramento water balance, Snow-17 and parameter configuration."""

__version__ = "0.1.0"

__all__ = [
    "grid",
    "trmmd_clip",
    "precip_type",
    "precip_reader",
    "sac",
    "sac_model",
    "snow17",
    "param_sections",
]