import math

import pytest

from geomcore.geom import point, vector
from geomcore.growable import GrowableXYZArray
from geomcore.xform import Rotation, Scale, Translation


def _ring():
    return GrowableXYZArray.create([point(0, 0), point(2, 0), point(2, 1), point(0, 1)])


class TestCapacity:

    def test_growth(self):
        g = GrowableXYZArray(8)
        assert len(g) == 0
        assert g.capacity == 8
        for i in range(9):
            g.push_xyz(i, 2 * i, 3 * i)
        assert len(g) == 9
        assert g.capacity >= 9
        assert g.float64_length == 27
        for i in range(9):
            assert g.point_at(i) == [i, 2 * i, 3 * i, 1.0]

    def test_zero_capacity(self):
        g = GrowableXYZArray(0)
        g.push(point(1, 2, 3))
        assert len(g) == 1
        assert g.front() == [1.0, 2.0, 3.0, 1.0]

    def test_bad_capacity(self):
        with pytest.raises(ValueError):
            GrowableXYZArray(-1)
        with pytest.raises(ValueError):
            GrowableXYZArray().ensure_capacity(-3)
        with pytest.raises(ValueError):
            GrowableXYZArray().resize(-1)

    def test_exact_round_trip(self):
        values = [0.1, 1.0 / 3.0, -2.718281828459045, 1.0e-300, 6.02214076e23]
        g = GrowableXYZArray(1)
        for v in values:
            g.push_xyz(v, -v, v * 0.5)
        for i, v in enumerate(values):
            assert g.point_at(i) == [v, -v, v * 0.5, 1.0]

    def test_ensure_capacity(self):
        g = _ring()
        g.ensure_capacity(20)
        assert g.capacity == 20
        assert len(g) == 4
        assert g.point_at(2) == [2.0, 1.0, 0.0, 1.0]
        g.ensure_capacity(20)
        assert g.capacity == 20
        g.ensure_capacity(5)
        assert g.capacity == 20

    def test_resize(self):
        g = GrowableXYZArray(10)
        g.push_all([point(i, i) for i in range(6)])
        g.resize(2)
        assert len(g) == 2
        assert g.capacity == 10
        assert g.back() == [1.0, 1.0, 0.0, 1.0]
        g.resize(12)
        assert len(g) == 12
        assert g.capacity >= 12
        assert g.point_at(1) == [1.0, 1.0, 0.0, 1.0]

    def test_clear(self):
        g = _ring()
        cap = g.capacity
        g.clear()
        assert len(g) == 0
        assert g.capacity == cap
        assert g.front() is None

    def test_clone(self):
        g = GrowableXYZArray(50)
        g.push_all([point(1, 2, 3), point(4, 5, 6)])
        c = g.clone()
        assert len(c) == 2
        assert c.capacity == 2
        assert GrowableXYZArray.is_almost_equal(g, c)
        c.set_coordinates(0, 9, 9, 9)
        assert g.point_at(0) == [1.0, 2.0, 3.0, 1.0]


class TestEditing:

    def test_push_wrap(self):
        g = _ring()
        g.push_wrap(1)
        assert len(g) == 5
        assert g.back() == g.front()
        with pytest.raises(ValueError):
            g.push_wrap(6)

    def test_push_from_and_transfer(self):
        g = _ring()
        h = GrowableXYZArray()
        assert h.push_from(g, 2)
        assert not h.push_from(g, 4)
        assert h.to_points() == [[2.0, 1.0, 0.0, 1.0]]
        assert g.transfer_from(0, h, 0)
        assert g.front() == [2.0, 1.0, 0.0, 1.0]
        assert not g.transfer_from(7, h, 0)
        assert not g.transfer_from(0, h, 1)

    def test_pop(self):
        g = _ring()
        g.pop()
        assert len(g) == 3
        g.pop()
        g.pop()
        g.pop()
        g.pop()
        assert len(g) == 0

    def test_set(self):
        g = _ring()
        assert g.set_at(1, point(5, 5, 5))
        assert g.point_at(1) == [5.0, 5.0, 5.0, 1.0]
        assert not g.set_at(4, point(1, 1, 1))
        assert not g.set_coordinates(-1, 1, 1, 1)
        assert g.component(1, 2) == 5.0

    def test_interpolate_and_distance(self):
        g = _ring()
        assert g.interpolate(0, 0.25, 1) == [0.5, 0.0, 0.0, 1.0]
        assert g.distance(0, 2) == pytest.approx(math.sqrt(5.0))
        assert g.distance(0, 9) is None
        assert g.interpolate(0, 0.5, 9) is None

    def test_repr(self):
        g = GrowableXYZArray.create([point(1, 2)])
        assert repr(g) == 'GrowableXYZArray([[1.0, 2.0]])'


class TestBulk:

    def test_transform(self):
        g = _ring()
        m = Translation(point(1, 2, 3)).mul(Rotation(vector(0, 0, 1), 90))
        expected = [m.transform_point(p) for p in g.to_points()]
        g.transform_in_place(m)
        for i, p in enumerate(expected):
            assert g.point_at(i) == pytest.approx(p)

    def test_inverse_transform(self):
        g = _ring()
        original = g.clone()
        m = Translation(point(4, -1, 2)).mul(Scale(2, 3, 0.5))
        g.transform_in_place(m)
        assert not GrowableXYZArray.is_almost_equal(g, original)
        assert g.try_transform_inverse_in_place(m)
        assert GrowableXYZArray.is_almost_equal(g, original)

    def test_singular_inverse(self):
        g = _ring()
        g.transform_in_place(Translation(point(1, 1, 1)))
        before = g.to_points()
        assert not g.try_transform_inverse_in_place(Scale(1, 0, 1))
        assert g.to_points() == before

    def test_extend_range(self):
        g = _ring()
        box = g.extend_range()
        assert box == [[0.0, 0.0, 0.0, 1.0], [2.0, 1.0, 0.0, 1.0]]
        other = [point(-1, 0.5, -3), point(1, 0.5, 4)]
        out = g.extend_range(other)
        assert out is other
        assert other == [[-1, 0.0, -3, 1], [2.0, 1.0, 4, 1]]
        moved = g.extend_range(None, Translation(point(10, 0, 0)))
        assert moved[0][0] == 10.0
        assert moved[1][0] == 12.0
        assert GrowableXYZArray().extend_range() is None

    def test_segment_lengths(self):
        g = _ring()
        assert g.sum_of_segment_lengths() == pytest.approx(5.0)
        g.push_wrap(1)
        assert g.sum_of_segment_lengths() == pytest.approx(6.0)
        assert GrowableXYZArray().sum_of_segment_lengths() == 0.0

    def test_plane(self):
        g = _ring()
        xy = [point(0, 0, 0), vector(0, 0, 1)]
        assert g.is_within_tolerance_of_plane(xy)
        g.set_coordinates(3, 0, 1, 0.1)
        assert not g.is_within_tolerance_of_plane(xy)
        assert g.is_within_tolerance_of_plane(xy, tol=0.2)

    def test_signed_area(self):
        g = _ring()
        assert g.signed_area_xy() == pytest.approx(2.0)
        g.push_wrap(1)
        assert g.signed_area_xy() == pytest.approx(2.0)
        rev = GrowableXYZArray.create(list(reversed(_ring().to_points())))
        assert rev.signed_area_xy() == pytest.approx(-2.0)

    def test_lexical_sort(self):
        g = GrowableXYZArray.create([point(1, 0, 0), point(0, 5, 0), point(0, 1, 2),
                                     point(1, 0, 0), point(0, 1, 1)])
        assert g.lexical_sort_indices() == [4, 2, 1, 0, 3]
        assert GrowableXYZArray().lexical_sort_indices() == []

    def test_almost_equal(self):
        a = _ring()
        b = _ring()
        b.set_coordinates(0, 1.0e-9, 0, 0)
        assert GrowableXYZArray.is_almost_equal(a, b)
        assert not GrowableXYZArray.is_almost_equal(a, b, tol=1.0e-12)
        assert GrowableXYZArray.is_almost_equal(None, None)
        assert not GrowableXYZArray.is_almost_equal(a, None)
        b.pop()
        assert not GrowableXYZArray.is_almost_equal(a, b)


class TestInPlace:

    def test_reverse(self):
        g = _ring()
        g.reverse_in_place()
        assert g.to_points() == [[0.0, 1.0, 0.0, 1.0], [2.0, 1.0, 0.0, 1.0],
                                 [2.0, 0.0, 0.0, 1.0], [0.0, 0.0, 0.0, 1.0]]
        assert g.signed_area_xy() == pytest.approx(-2.0)
        odd = GrowableXYZArray.create([point(1, 0), point(2, 0), point(3, 0)])
        odd.reverse_in_place()
        assert [p[0] for p in odd.to_points()] == [3.0, 2.0, 1.0]
        empty = GrowableXYZArray()
        empty.reverse_in_place()
        assert len(empty) == 0

    def test_scale(self):
        g = _ring()
        g.scale_in_place(3.0)
        assert g.point_at(2) == [6.0, 3.0, 0.0, 1.0]
        assert g.signed_area_xy() == pytest.approx(18.0)

    def test_multiply_matrix3d(self):
        g = GrowableXYZArray.create([point(1, 2, 3)])
        m = Translation(point(10, 10, 10)).mul(Scale(2, 3, 4))
        g.multiply_matrix3d_in_place(m)
        # translation is ignored
        assert g.point_at(0) == [2.0, 6.0, 12.0, 1.0]
        g.multiply_matrix3d_in_place(Rotation(vector(0, 0, 1), 90))
        assert g.point_at(0) == pytest.approx([-6.0, 2.0, 12.0, 1.0])

    def test_get_range(self):
        g = _ring()
        assert g.get_range() == [[0.0, 0.0, 0.0, 1.0], [2.0, 1.0, 0.0, 1.0]]
        box = g.get_range(Scale(-1, 1, 1))
        assert box[0][0] == -2.0
        assert box[1][0] == 0.0
        assert GrowableXYZArray().get_range() is None

    def test_distance_to_point(self):
        g = _ring()
        assert g.distance_index_to_point(1, point(2, 0, 5)) == pytest.approx(5.0)
        assert g.distance_index_to_point(2, (5, 5)) == pytest.approx(5.0)
        assert g.distance_index_to_point(4, point(0, 0)) is None

    def test_move_index_to_index(self):
        g = _ring()
        assert g.move_index_to_index(2, 0)
        assert g.point_at(0) == [2.0, 1.0, 0.0, 1.0]
        assert g.point_at(2) == [2.0, 1.0, 0.0, 1.0]
        assert not g.move_index_to_index(0, 4)
        assert not g.move_index_to_index(-1, 0)
        assert len(g) == 4

    def test_accumulate_scaled(self):
        g = _ring()
        total = point(0, 0, 0)
        for i in range(len(g)):
            g.accumulate_scaled_xyz(i, 0.25, total)
        assert total == pytest.approx([1.0, 0.5, 0.0, 1.0])
        g.accumulate_scaled_xyz(9, 1.0, total)
        assert total == pytest.approx([1.0, 0.5, 0.0, 1.0])


def test_two_dimensional_points():
    g = GrowableXYZArray.create([(0, 0), (1, 0), (1, 1)])
    g.push((0, 1))
    assert g.set_at(0, (0.5, 0.5))
    assert g.to_points() == [[0.5, 0.5, 0.0, 1.0], [1.0, 0.0, 0.0, 1.0],
                             [1.0, 1.0, 0.0, 1.0], [0.0, 1.0, 0.0, 1.0]]
