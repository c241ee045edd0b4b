import pytest

from femesh.bimap import BiMap


def test_lookup_from_both_sides():
    markers = BiMap()
    markers.insert("boundary", 1)
    markers.insert("domain", 2)
    assert markers.at_left("boundary") == 1
    assert markers.at_left("domain") == 2
    assert markers.at_right(1) == "boundary"
    assert markers.at_right(2) == "domain"


def test_length_counts_insertions():
    markers = BiMap()
    assert len(markers) == 0
    markers.insert("a", 10)
    markers.insert("b", 20)
    assert len(markers) == 2


def test_iteration_yields_pairs():
    markers = BiMap()
    pairs = [("a", 1), ("b", 2), ("c", 3)]
    for left, right in pairs:
        markers.insert(left, right)
    assert sorted(markers) == pairs


def test_missing_left_key_raises():
    markers = BiMap()
    markers.insert("a", 1)
    with pytest.raises(KeyError):
        markers.at_left("missing")


def test_missing_right_key_raises():
    markers = BiMap()
    markers.insert("a", 1)
    with pytest.raises(KeyError):
        markers.at_right(99)


def test_duplicate_insert_keeps_first_pair():
    markers = BiMap()
    markers.insert("a", 1)
    markers.insert("a", 2)
    assert markers.at_left("a") == 1
    assert markers.at_right(2) == "a"
    assert len(markers) == 2


def test_round_trip_through_both_sides():
    markers = BiMap()
    for left, right in [("x", 5), ("y", 6), ("z", 7)]:
        markers.insert(left, right)
    for left, right in markers:
        assert markers.at_right(markers.at_left(left)) == left
        assert markers.at_left(markers.at_right(right)) == right