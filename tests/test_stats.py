from stats import COUNTERS, Statistics


def test_new_statistics_are_zero():
    s = Statistics()
    assert all(getattr(s, name) == 0 for name in COUNTERS)
    assert s.miss_rate() == 0.0
    assert s.hit_rate() == 1.0


def test_miss_rate_quarter():
    s = Statistics()
    s.hits = 3
    s.misses = 1
    assert s.miss_rate() == 0.25
    assert s.hit_rate() == 0.75


def test_miss_rate_rounds_to_four_places():
    s = Statistics()
    s.hits = 2
    s.misses = 1
    assert s.miss_rate() == 0.3333
    assert s.hit_rate() == 0.6667


def test_miss_rate_ignores_accesses_counter():
    s = Statistics()
    s.accesses = 10
    assert s.miss_rate() == 0.0


def test_as_dict():
    s = Statistics()
    s.accesses = 4
    s.hits = 3
    s.misses = 1
    s.reads = 1
    d = s.as_dict()
    assert d == {
        "accesses": 4, "hits": 3, "misses": 1, "reads": 1, "writes": 0, "replaces": 0,
        "miss_rate": 0.25, "hit_rate": 0.75,
    }
