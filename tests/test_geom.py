import pytest
from geomcore.geom import *
## unit tests for geomcore geom.py

class TestPoint:
    """unit tests for point and vector construction"""

    def test_create(self):
        a = point(5,0)
        b = point(0,5,-2)
        c = point(-2.3,4.6,-9.2,0.5)
        bb = point(b)
        assert a == [5,0,0,1]
        assert b == [0,5,-2,1]
        assert c == [-2.3,4.6,-9.2,0.5]
        assert bb == b and bb is not b

    def test_bad_w(self):
        with pytest.raises(ValueError):
            point(1,2,3,-1)

    def test_vector(self):
        v = vector(1,2,3)
        assert v == [1,2,3,0.0]
        assert not ispoint(v)

    def test_discrimate(self):
        a = point(5,0)
        assert ispoint(a)
        assert not ispoint(vect(1,2,3,-1))
        assert ispoint([0,2,2,1])
        assert not ispoint([1,2])
        assert not isvect([True,0,0,1])

    def test_vset(self):
        r = [9,9,9,9]
        out = vset(r,1,2,3)
        assert out is r
        assert r == [1,2,3,1.0]
        assert vset(None,1,2,3,0.0) == [1,2,3,0.0]

    def test_format(self):
        assert vstr(point(5,0)) == '[5, 0]'
        assert vstr(point(2,3,2)) == '[2, 3, 2]'
        assert vstr(point(1,2,3,4)) == '[1, 2, 3, 4]'
        assert vstr(vector(1,0,0)) == '<1, 0, 0>'
        assert vstr([point(1,1),point(2,2)]) == '[[1, 1], [2, 2]]'


class TestOperations:
    def test_vect(self):
        a = point(5,0)
        b = point(0,5)
        c = point(-3,-3)
        d = point(1,1)
        assert mag(a) == pytest.approx(5.0)
        assert dot(a,b) == 0
        assert dot(d,c) == -6
        assert cross(a,b) == [0,0,25,0.0]
        assert cross(b,a) == [0,0,-25,0.0]
        assert mag(cross(d,c)) == 0

    def test_cross_result(self):
        r = vector()
        out = cross(vector(1,0,0),vector(0,1,0),r)
        assert out is r
        assert r == [0,0,1,0.0]
        assert crossxyz(None,0,1,0,0,0,1) == [1,0,0,0.0]

    def test_normalize(self):
        n = normalize(vector(3,0,4))
        assert n == pytest.approx(vector(0.6,0,0.8))
        assert n[3] == 0.0
        r = vector(7,7,7)
        assert normalize(vector(0,0,0),r) is None
        assert r == vector(7,7,7)


def test_conditional_divide():
    assert conditional_divide(1.0,4.0) == 0.25
    assert conditional_divide(1.0,0.0) is None
    assert conditional_divide(1.0,1.0e-12) is None
    assert conditional_divide(0.0,0.0) is None


def test_isgoodnum():
    assert isgoodnum(1)
    assert isgoodnum(1.5)
    assert not isgoodnum(True)
    assert not isgoodnum('1')
