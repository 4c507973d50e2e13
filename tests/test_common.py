import math

from encviz.common import Envelope


def test_default_envelope_is_empty():
    empty = Envelope()
    assert empty.min_x == math.inf
    assert empty.max_x == -math.inf


def test_merge_with_empty_returns_other():
    box = Envelope(min_x=1.0, max_x=2.0, min_y=3.0, max_y=4.0)
    assert Envelope().merge(box) == box
    assert box.merge(Envelope()) == box


def test_merge_covers_both():
    a = Envelope(min_x=0.0, max_x=1.0, min_y=0.0, max_y=1.0)
    b = Envelope(min_x=5.0, max_x=6.0, min_y=-2.0, max_y=0.5)
    merged = a.merge(b)
    for box in (a, b):
        assert merged.min_x <= box.min_x
        assert merged.max_x >= box.max_x
        assert merged.min_y <= box.min_y
        assert merged.max_y >= box.max_y
    assert merged == b.merge(a)


def test_intersects_overlapping():
    a = Envelope(min_x=0.0, max_x=2.0, min_y=0.0, max_y=2.0)
    b = Envelope(min_x=1.0, max_x=3.0, min_y=1.0, max_y=3.0)
    assert a.intersects(b)
    assert b.intersects(a)


def test_intersects_touching_edges():
    a = Envelope(min_x=0.0, max_x=1.0, min_y=0.0, max_y=1.0)
    b = Envelope(min_x=1.0, max_x=2.0, min_y=0.0, max_y=1.0)
    assert a.intersects(b)


def test_disjoint_does_not_intersect():
    a = Envelope(min_x=0.0, max_x=1.0, min_y=0.0, max_y=1.0)
    b = Envelope(min_x=2.0, max_x=3.0, min_y=0.0, max_y=1.0)
    c = Envelope(min_x=0.0, max_x=1.0, min_y=5.0, max_y=6.0)
    assert not a.intersects(b)
    assert not a.intersects(c)


def test_empty_intersects_nothing():
    box = Envelope(min_x=-10.0, max_x=10.0, min_y=-10.0, max_y=10.0)
    assert not Envelope().intersects(box)
    assert not box.intersects(Envelope())