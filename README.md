# hydrosim

Building blocks for distributed hydrologic simulation on gridded basins.

The package works on north-up rasters of floats (`hydrosim.grid.FloatGrid`)
and on the basin cells a simulation runs over (`hydrosim.grid.GridNode`).
It uses only the Python standard library.

## Modules

- **`hydrosim.grid`** — `FloatGrid` (with `get_grid_loc` and
  `is_spatial_match`), `GridLoc` and `GridNode`.
  `read_trmmd_grid` reads the gzip-compressed, big-endian 0.25° TRMM daily
  product (1440 × 400 cells, 50°S–50°N, 180°W–180°E), flipping rows so row 0
  is north; a short file raises `ValueError`. `write_asc_grid` writes any grid
  as an ESRI ASCII grid. `sample_to_nodes` takes a grid's value under each
  node, scaled, with no-data (and optionally non-positive) values giving 0.
- **`hydrosim.trmmd_clip`** — `snap_to_quarter`, `validate_bounds`,
  `clip_grid` and the `main` function behind the `trmmd-clip` command.
- **`hydrosim.precip_type`** — the `PrecipType` enum (ASC, MRMS, TRMMRT,
  TRMMV7, BIF, TIF), `parse_precip_type` (case-insensitive, `ValueError` when
  unknown) and `precip_type_names`.
- **`hydrosim.precip_reader`** — `PrecipReader` reads precipitation files
  through loaders you supply, one callable per `PrecipType`, each taking a
  path and returning a `FloatGrid` or `None`. `read` returns
  `(found, values)`: reading the same file again returns the earlier values;
  a missing file gives zeros, unless `has_qpf` is set, in which case the
  earlier values are kept and the file is tried again next time. Unknown
  formats raise `ValueError`.
- **`hydrosim.sac`** — Sacramento soil moisture accounting for one cell:
  `SacParams`, `SacCell` and `water_balance_cell`, which updates the cell's
  storages and returns surface and ground runoff (mm) for the step.
- **`hydrosim.sac_model`** — `SacModel` runs the Sacramento model over a set
  of nodes. `initialize` distributes per-gauge parameters, scaled by optional
  parameter grids; `water_balance` returns a `WaterBalanceOutput` of fast,
  slow and base flow rates (mm/s) and soil moisture (%). `state_values`,
  `load_state_values`, `save_states` (through a writer callable) and
  `load_states` (through a reader callable, keeping only DEM-matching grids)
  handle the six storages.
- **`hydrosim.snow17`** — the Snow-17 snow model: `Snow17Params`,
  `Snow17Cell`, `atmospheric_pressure`, `snow_balance_cell` and
  `Snow17Model`, whose `snow_balance` returns outflow rates (mm/h) and snow
  water equivalent (mm) per node.
- **`hydrosim.param_sections`** — `ParamSetSection` (per-gauge parameter
  values and parameter grid file names) and `CaliParamSection` (calibration
  `min,max[,init]` ranges) parse configuration keys and raise `ConfigError`
  on unknown gauges, unknown or duplicate parameters and incomplete sets.
  `SectionRegistry` keeps sections by name and rejects duplicates.

## Example

```python
from hydrosim.precip_type import PrecipType, parse_precip_type
from hydrosim.sac import SacCell, SacParams, water_balance_cell
from hydrosim.trmmd_clip import snap_to_quarter

assert parse_precip_type("mrms") is PrecipType.MRMS
assert snap_to_quarter(10.3) == 10.25

params = SacParams(uztwm=50, uzfwm=40, uzk=0.3, lztwm=130, lzfsm=25,
                   lzfpm=60, lzsk=0.05, lzpk=0.01, zperc=40, rexp=2,
                   pfree=0.1, uztwc=0.5, uzfwc=0.5, lztwc=0.5,
                   lzfsc=0.5, lzfpc=0.5)
cell = SacCell.from_params(params)
surface, ground = water_balance_cell(cell, step_hours=1.0,
                                     precip_rate=5.0, pet_rate=0.1)
```

## Clipping TRMM daily grids

The `trmmd-clip` command cuts a window out of a TRMM daily file and writes it
as an ESRI ASCII grid:

```
trmmd-clip INPUT OUTPUT [TOP BOTTOM LEFT RIGHT]
```

Without bounds the whole 50°S–50°N, 180°W–180°E extent is kept. Bounds are
truncated toward zero to a multiple of 0.25°; top and bottom must lie within
±50° with top above bottom, and left and right within ±180° with left west of
right. Problems are reported as a printed message.

## What the package does not do

- It does not compute flood frequency or return periods from discharge, and
  it has no inundation or flood-depth model.
- It has no complete simulation driver: there is no command that reads a
  project configuration and runs a basin over time, no routing model and no
  calibration.
- Apart from the TRMM daily reader and the ASCII grid writer it reads and
  writes no raster formats; precipitation loaders and state grid readers and
  writers are callables supplied by the caller.