import pytest

from hydrosim.grid import FloatGrid, GridNode
from hydrosim.snow17 import (
    PARAM_NAMES,
    STATE_NAMES,
    Snow17Cell,
    Snow17Model,
    Snow17Params,
    atmospheric_pressure,
    snow_balance_cell,
)


def _params(**overrides):
    base = dict(
        uadj=0.04, mbase=0.0, mfmax=1.2, mfmin=0.3, tipm=0.1, nmf=0.15, plwhc=0.04, scf=1.0
    )
    base.update(overrides)
    return Snow17Params(**base)


def _dem(value=500.0):
    return FloatGrid(num_cols=2, num_rows=1, cell_size=1.0, left=0.0, bottom=0.0,
                     data=[[value, value]])


def _nodes(gauge="g"):
    return [
        GridNode(x=0, y=0, ref_x=0.5, ref_y=0.5, index=0, gauge=gauge),
        GridNode(x=1, y=0, ref_x=1.5, ref_y=0.5, index=1, gauge=gauge),
    ]


def test_atmospheric_pressure_sea_level():
    assert atmospheric_pressure(0.0) == pytest.approx(1012.414)


def test_atmospheric_pressure_falls_with_elevation():
    assert atmospheric_pressure(2000.0) < atmospheric_pressure(1000.0) < atmospheric_pressure(0.0)


def test_cold_precip_accumulates_as_snow():
    cell = Snow17Cell(params=_params(), p_atm=atmospheric_pressure(0.0))
    melt, swe = snow_balance_cell(cell, 6.0, 10.0, 1.0, -5.0)
    assert melt == 0.0
    assert swe == pytest.approx(6.0)
    assert cell.wi == pytest.approx(6.0)


def test_rain_on_bare_ground_passes_through():
    cell = Snow17Cell(params=_params(), p_atm=atmospheric_pressure(0.0))
    melt, swe = snow_balance_cell(cell, 6.0, 180.0, 2.0, 10.0)
    assert melt == pytest.approx(2.0)
    assert swe == 0.0
    assert cell.wq == 0.0


def test_ati_never_positive_and_deficit_bounded():
    cell = Snow17Cell(params=_params(nmf=5.0), p_atm=atmospheric_pressure(0.0))
    for temp in (-10.0, -8.0, -3.0, -12.0, 4.0, -2.0):
        snow_balance_cell(cell, 6.0, 30.0, 0.5, temp)
        assert cell.ati <= 0.0
        assert 0.0 <= cell.deficit <= 0.33 * cell.wi + 1e-12


def test_scf_scales_new_snow():
    low = Snow17Cell(params=_params(scf=1.0))
    high = Snow17Cell(params=_params(scf=2.0))
    _, swe_low = snow_balance_cell(low, 6.0, 10.0, 1.0, -5.0)
    _, swe_high = snow_balance_cell(high, 6.0, 10.0, 1.0, -5.0)
    assert swe_high == pytest.approx(2.0 * swe_low)


def test_mass_is_conserved_without_holding_capacity():
    cell = Snow17Cell(params=_params(plwhc=0.0, scf=1.0), p_atm=atmospheric_pressure(300.0))
    step = 3.0
    forcing = [(1.0, -6.0), (2.0, -1.0), (0.5, 3.0), (1.5, 8.0), (0.0, 12.0), (1.0, -4.0)]
    total_in = 0.0
    total_out = 0.0
    swe = 0.0
    for precip, temp in forcing:
        total_in += precip * step
        melt, swe = snow_balance_cell(cell, step, 60.0, precip, temp)
        total_out += melt * step
    assert total_in == pytest.approx(total_out + swe, rel=1e-9, abs=1e-9)


def test_params_from_sequence_roundtrip_and_error():
    values = [float(i) for i in range(len(PARAM_NAMES))]
    params = Snow17Params.from_sequence(values)
    assert params.as_list() == values
    with pytest.raises(ValueError):
        Snow17Params.from_sequence(values[:-1])


def test_initialize_sets_pressure_and_clears_states():
    model = Snow17Model()
    nodes = _nodes()
    model.initialize(nodes, {"g": _params()}, [None] * len(PARAM_NAMES), _dem(500.0))
    assert all(cell.p_atm == pytest.approx(atmospheric_pressure(500.0)) for cell in model.cells)
    model.load_state_values("wi", [3.0, 4.0])
    model.initialize(nodes, {"g": _params()}, [None] * len(PARAM_NAMES), _dem(500.0))
    assert model.state_values()["wi"] == [0.0, 0.0]


def test_param_grid_scales_and_replaces_zero():
    model = Snow17Model()
    dem = _dem()
    scf_grid = FloatGrid(num_cols=2, num_rows=1, cell_size=1.0, left=0.0, bottom=0.0,
                         data=[[2.0, 0.0]])
    grids = [None] * len(PARAM_NAMES)
    grids[PARAM_NAMES.index("scf")] = scf_grid
    model.initialize(_nodes(), {"g": _params(scf=1.0)}, grids, dem)
    assert model.cells[0].params.scf == pytest.approx(2.0)
    assert model.cells[1].params.scf == pytest.approx(0.01)
    assert scf_grid.data[0][1] == 0.01


def test_param_grid_located_by_reference_point():
    model = Snow17Model()
    grid = FloatGrid(num_cols=1, num_rows=1, cell_size=4.0, left=0.0, bottom=0.0,
                     data=[[3.0]])
    grids = [None] * len(PARAM_NAMES)
    grids[PARAM_NAMES.index("mbase")] = grid
    model.initialize(_nodes(), {"g": _params(mbase=1.0)}, grids, _dem())
    assert [c.params.mbase for c in model.cells] == [pytest.approx(3.0), pytest.approx(3.0)]


def test_snow_balance_over_nodes():
    model = Snow17Model()
    model.initialize(_nodes(), {"g": list(_params().as_list())}, [None] * 8, _dem())
    melt, swe = model.snow_balance(20.0, 6.0, [1.0, 2.0], [-5.0, 10.0])
    assert melt[0] == 0.0
    assert swe[0] == pytest.approx(6.0)
    assert melt[1] == pytest.approx(2.0)
    assert swe[1] == 0.0
    assert model.state_values()["wi"][0] == pytest.approx(6.0)


def test_snow_balance_length_mismatch():
    model = Snow17Model()
    model.initialize(_nodes(), {"g": _params()}, [None] * 8, _dem())
    with pytest.raises(ValueError):
        model.snow_balance(1.0, 1.0, [1.0], [0.0, 0.0])


def test_state_values_roundtrip():
    model = Snow17Model()
    model.initialize(_nodes(), {"g": _params()}, [None] * 8, _dem())
    model.load_state_values("deficit", [0.5, None])
    model.load_state_values("wq", [1.5, 2.5])
    states = model.state_values()
    assert set(states) == set(STATE_NAMES)
    assert states["deficit"] == [0.5, 0.0]
    assert states["wq"] == [1.5, 2.5]


def test_load_state_values_errors():
    model = Snow17Model()
    model.initialize(_nodes(), {"g": _params()}, [None] * 8, _dem())
    with pytest.raises(KeyError):
        model.load_state_values("swe", [0.0, 0.0])
    with pytest.raises(ValueError):
        model.load_state_values("wi", [0.0])