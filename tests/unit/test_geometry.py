import pytest

from addrquery.common.errors import GeometryParseError, ValidationError
from addrquery.query.geometry import MultiPolygon, Polygon, close_rings, parse_wkt, to_geojson, to_wkt

LA_WKT = "POLYGON((-118.28 34.16, -118.28 34.22, -118.25 34.22, -118.25 34.16, -118.28 34.16))"


def test_parse_polygon_keeps_point_order():
    geometry = parse_wkt(LA_WKT)

    assert isinstance(geometry, Polygon)
    assert len(geometry.rings) == 1
    assert geometry.rings[0][0] == (-118.28, 34.16)
    assert geometry.rings[0][2] == (-118.25, 34.22)
    assert len(geometry.rings[0]) == 5


def test_parse_is_case_insensitive_and_whitespace_tolerant():
    geometry = parse_wkt("  polygon ( ( 1 2 ,3 4,  5 6 , 1 2 ) )  ")
    assert geometry.rings == (((1.0, 2.0), (3.0, 4.0), (5.0, 6.0), (1.0, 2.0)),)


def test_parse_polygon_with_hole_returns_sibling_rings():
    geometry = parse_wkt("POLYGON((0 0, 10 0, 10 10, 0 10, 0 0), (2 2, 4 2, 4 4, 2 2))")

    assert len(geometry.rings) == 2
    assert geometry.rings[1][0] == (2.0, 2.0)


def test_parse_multipolygon_splits_polygons_then_rings():
    geometry = parse_wkt(
        "MULTIPOLYGON(((0 0, 1 0, 1 1, 0 0)), ((5 5, 9 5, 9 9, 5 5), (6 6, 7 6, 7 7, 6 6)))"
    )

    assert isinstance(geometry, MultiPolygon)
    assert len(geometry.polygons) == 2
    assert len(geometry.polygons[0].rings) == 1
    assert len(geometry.polygons[1].rings) == 2
    assert geometry.polygons[1].rings[1][-1] == (6.0, 6.0)


@pytest.mark.parametrize(
    "wkt",
    [
        "POINT(1 2)",
        "LINESTRING(0 0, 1 1)",
        "",
        "   ",
    ],
)
def test_parse_rejects_unsupported_shapes(wkt):
    with pytest.raises(GeometryParseError):
        parse_wkt(wkt)


def test_geometry_parse_error_is_a_validation_error():
    with pytest.raises(ValidationError):
        parse_wkt("CIRCLE(0 0, 5)")


@pytest.mark.parametrize(
    "wkt",
    [
        "POLYGON((1 2, 3 4, 5 6, 1 2)",
        "POLYGON(1 2, 3 4, 5 6, 1 2))",
        "MULTIPOLYGON(((1 2, 3 4, 5 6, 1 2))",
    ],
)
def test_parse_rejects_unbalanced_parentheses(wkt):
    with pytest.raises(GeometryParseError):
        parse_wkt(wkt)


def test_parse_reports_offending_fragment():
    with pytest.raises(GeometryParseError) as excinfo:
        parse_wkt("POLYGON((1 2, east 4, 5 6, 1 2))")

    assert excinfo.value.fragment == "east 4"
    assert "east 4" in str(excinfo.value)


@pytest.mark.parametrize(
    "pair",
    ["1 2 3", "1", "nan 2", "1 inf"],
)
def test_parse_rejects_malformed_coordinate_pairs(pair):
    with pytest.raises(GeometryParseError):
        parse_wkt(f"POLYGON((0 0, {pair}, 5 6, 0 0))")


def test_parse_rejects_trailing_garbage():
    with pytest.raises(GeometryParseError):
        parse_wkt(LA_WKT + " extra")


def test_parse_passes_open_rings_through_unchanged():
    geometry = parse_wkt("POLYGON((0 0, 1 0, 1 1, 0 1))")
    assert geometry.rings[0][0] != geometry.rings[0][-1]
    assert len(geometry.rings[0]) == 4


def test_wkt_round_trip_reproduces_rings():
    for wkt in (
        LA_WKT,
        "POLYGON((0 0, 10 0, 10 10, 0 10, 0 0), (2 2, 4 2, 4 4, 2 2))",
        "MULTIPOLYGON(((0.5 0.25, 1 0, 1 1, 0.5 0.25)), ((5 5, 9 5, 9 9, 5 5)))",
    ):
        geometry = parse_wkt(wkt)
        assert parse_wkt(to_wkt(geometry)) == geometry


def test_to_geojson_shapes():
    polygon = parse_wkt("POLYGON((0 0, 1 0, 1 1, 0 0))")
    multi = parse_wkt("MULTIPOLYGON(((0 0, 1 0, 1 1, 0 0)))")

    assert to_geojson(polygon) == {"type": "Polygon", "coordinates": [[[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]]]}
    assert to_geojson(multi)["type"] == "MultiPolygon"
    assert to_geojson(multi)["coordinates"][0] == to_geojson(polygon)["coordinates"]


def test_close_rings_closes_open_rings_only():
    open_polygon = parse_wkt("POLYGON((0 0, 1 0, 1 1))")
    closed = close_rings(open_polygon)
    assert closed.rings[0] == ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0))

    already_closed = parse_wkt(LA_WKT)
    assert close_rings(already_closed) == already_closed

    multi = close_rings(parse_wkt("MULTIPOLYGON(((0 0, 1 0, 1 1)), ((5 5, 6 5, 6 6, 5 5)))"))
    assert all(ring[0] == ring[-1] for polygon in multi.polygons for ring in polygon.rings)
