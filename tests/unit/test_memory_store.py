import pytest

from addrquery.common.errors import StoreOperationError
from addrquery.common.models import Address
from addrquery.query.geometry import parse_wkt
from addrquery.query.predicates import (
    KeyAfter,
    NearPoint,
    SubstringMatch,
    WithinRegion,
    all_of,
)
from addrquery.store.memory import InMemoryAddressStore, geodesic_distance_m


def _address(address_id: str, lon: float, lat: float, **fields) -> Address:
    return Address(id=address_id, hash=f"hash-{address_id}", longitude=lon, latitude=lat, **fields)


def test_insert_assigns_increasing_keys_and_enforces_uniqueness():
    store = InMemoryAddressStore()
    first = store.insert(_address("a", 5.0, 52.0))
    second = store.insert(_address("b", 5.0, 52.0))

    assert (first.record_key, second.record_key) == (1, 2)
    assert len(store) == 2

    with pytest.raises(StoreOperationError):
        store.insert(_address("a", 1.0, 1.0))
    with pytest.raises(StoreOperationError):
        store.insert(Address(id="c", hash="hash-b", longitude=1.0, latitude=1.0))


def test_substring_match_is_case_insensitive():
    store = InMemoryAddressStore([_address("a", 5.0, 52.0, city="Amsterdam-Noord"), _address("b", 5.0, 52.0, city="Delft")])

    records = store.find(SubstringMatch(field="city", value="AMSTERDAM"))
    assert [record.id for record in records] == ["a"]


def test_within_region_treats_later_rings_as_holes():
    region = parse_wkt("POLYGON((0 0, 10 0, 10 10, 0 10, 0 0), (4 4, 6 4, 6 6, 4 6, 4 4))")
    store = InMemoryAddressStore(
        [
            _address("inside", 2.0, 2.0),
            _address("in-hole", 5.0, 5.0),
            _address("outside", 12.0, 5.0),
            _address("on-edge", 0.0, 5.0),
        ]
    )

    records = store.find(WithinRegion(geometry=region))
    assert [record.id for record in records] == ["inside", "on-edge"]


def test_multipolygon_containment():
    region = parse_wkt("MULTIPOLYGON(((0 0, 1 0, 1 1, 0 1, 0 0)), ((5 5, 6 5, 6 6, 5 6, 5 5)))")
    store = InMemoryAddressStore([_address("a", 0.5, 0.5), _address("b", 5.5, 5.5), _address("c", 3.0, 3.0)])

    assert [record.id for record in store.find(WithinRegion(geometry=region))] == ["a", "b"]


def test_near_point_filters_by_distance_and_orders_nearest_first():
    store = InMemoryAddressStore(
        [
            _address("far", 6.8636568, 53.3446772),
            _address("mid", 6.8636568, 53.3291772),
            _address("here", 6.8636568, 53.3246772),
        ]
    )

    records = store.find(NearPoint(longitude=6.8636568, latitude=53.3246772, max_distance_m=1000.0))

    assert [record.id for record in records] == ["here", "mid"]


def test_key_after_and_limit():
    store = InMemoryAddressStore([_address(str(i), 5.0, 52.0) for i in range(5)])

    records = store.find(all_of(KeyAfter(key=2)), limit=2, order_by_key=True)
    assert [record.record_key for record in records] == [3, 4]


def test_record_key_codec():
    store = InMemoryAddressStore()
    assert store.parse_record_key("42") == 42
    assert store.format_record_key(42) == "42"
    with pytest.raises(ValueError):
        store.parse_record_key("4x")


def test_geodesic_distance_is_roughly_metric():
    # 0.0045 degrees of latitude is about 500 m.
    distance = geodesic_distance_m(6.8636568, 53.3246772, 6.8636568, 53.3291772)
    assert 495 < distance < 505


def test_summary_reports_top_cities_and_streets():
    store = InMemoryAddressStore(
        [
            _address("a", 5.0, 52.0, city="Delft", street="Markt"),
            _address("b", 5.0, 52.0, city="Delft", street="Oude Delft"),
            _address("c", 5.0, 52.0, city="Leiden", street="Markt"),
            _address("d", 5.0, 52.0),
        ]
    )

    summary = store.summary(top=1)

    assert summary["total_addresses"] == 4
    assert summary["cities"] == [{"name": "Delft", "count": 2}]
    assert summary["streets"] == [{"name": "Markt", "count": 2}]


def test_only_one_record_may_lack_a_hash():
    store = InMemoryAddressStore([Address(id="a", hash="", longitude=5.0, latitude=52.0)])

    with pytest.raises(StoreOperationError):
        store.insert(Address(id="b", hash="", longitude=5.0, latitude=52.0))
    assert len(store) == 1
