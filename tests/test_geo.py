import math

import pytest

from gamenet.services.geo import bounding_box, find_nearby_venues, haversine_km


def test_haversine_one_degree_on_equator():
    assert haversine_km(0, 0, 0, 1) == pytest.approx(111.19492664455873, abs=0.001)


def test_haversine_is_symmetric_and_zero_on_same_point():
    d1 = haversine_km(35.6892, 51.3890, 32.6546, 51.6680)
    d2 = haversine_km(32.6546, 51.6680, 35.6892, 51.3890)
    assert d1 == pytest.approx(d2, abs=0.001)
    assert haversine_km(35.0, 51.0, 35.0, 51.0) == 0


def test_bounding_box_deltas():
    box = bounding_box(35.0, 51.0, 10)
    assert box.max_lat - 35.0 == pytest.approx(10 / 111.32)
    assert box.max_lon - 51.0 == pytest.approx(10 / (111.32 * math.cos(math.radians(35.0))))
    assert box.contains(35.0, 51.0)
    assert not box.contains(36.0, 51.0)


def test_find_nearby_filters_by_radius_and_sorts(db, make):
    far = make.venue(lat=0.135, lon=0.0, username="far")        # ~15 km
    near = make.venue(lat=0.045, lon=0.0, username="near")      # ~5 km
    nearest = make.venue(lat=0.0, lon=0.009, username="nearest")  # ~1 km
    make.venue(lat=None, lon=None, username="nowhere")

    found = find_nearby_venues(db, 0.0, 0.0, 10)

    assert [v.username for v, _ in found] == ["nearest", "near"]
    assert found[0][1] == pytest.approx(haversine_km(0, 0, 0, 0.009), abs=0.001)
    assert far.id not in {v.id for v, _ in found}
    assert near.id in {v.id for v, _ in found}
    assert nearest.id == found[0][0].id


def test_bbox_corner_outside_circle_is_excluded(db, make):
    # Inside the bounding box but ~12.6 km from the center
    make.venue(lat=0.08, lon=0.08, username="corner")
    assert find_nearby_venues(db, 0.0, 0.0, 10) == []


def test_find_nearby_limit_and_city(db, make):
    make.venue(lat=0.01, lon=0.0, username="a", city="Tehran")
    make.venue(lat=0.02, lon=0.0, username="b", city="Karaj")
    make.venue(lat=0.03, lon=0.0, username="c", city="Tehran")

    assert [v.username for v, _ in find_nearby_venues(db, 0, 0, 10, limit=2)] == ["a", "b"]
    assert [v.username for v, _ in find_nearby_venues(db, 0, 0, 10, city="Tehran")] == ["a", "c"]
