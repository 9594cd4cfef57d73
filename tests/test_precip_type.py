import pytest

from hydrosim.precip_type import PrecipType, parse_precip_type, precip_type_names


@pytest.mark.parametrize(
    "text, expected",
    [
        ("asc", PrecipType.ASCII),
        ("MRMS", PrecipType.MRMS),
        ("TrmmRT", PrecipType.TRMMRT),
        ("trmmv7", PrecipType.TRMMV7),
        ("BIF", PrecipType.BIF),
        ("tif", PrecipType.TIF),
    ],
)
def test_parse_known(text, expected):
    assert parse_precip_type(text) is expected


def test_parse_round_trips_every_member():
    for kind in PrecipType:
        assert parse_precip_type(kind.value.upper()) is kind


def test_parse_unknown():
    with pytest.raises(ValueError):
        parse_precip_type("grib")


def test_names():
    assert precip_type_names() == "ASC, MRMS, TRMMRT, TRMMV7, BIF, TIF"