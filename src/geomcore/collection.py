"""Indexed access to sequences of XYZ coordinates.

Algorithms in :mod:`geomcore.polyops` never look at how coordinates are
stored.  They read through the :class:`IndexedXYZCollection` contract,
which is implemented by the packed :class:`~geomcore.growable.GrowableXYZArray`
and by :class:`PointArrayCarrier`, a thin adapter around an ordinary
list of points.

Every index-taking method is partial: an index outside ``[0, len)``
yields ``None`` rather than an exception.  The accumulating methods,
:meth:`IndexedXYZCollection.accumulate_cross_product_of_targets` and
:meth:`IndexedXYZCollection.accumulate_scaled_xyz`, silently do nothing
instead so that summation loops need no branch per
term.  Methods that produce a point or vector take an optional
``result`` list which is overwritten and returned instead of allocating.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from geomcore.geom import crossxyz, vset

Vec4 = List[float]


class IndexedXYZCollection(ABC):
    """Abstract read access to XYZ data by integer position."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    def is_valid_index(self, index: int) -> bool:
        return 0 <= index < len(self)

    @abstractmethod
    def point_at(self, index: int, result: Optional[Vec4] = None) -> Optional[Vec4]:
        """Return element ``index`` as a point ``[x, y, z, 1]``."""

    @abstractmethod
    def vector_at(self, index: int, result: Optional[Vec4] = None) -> Optional[Vec4]:
        """Return element ``index`` as a direction vector ``[x, y, z, 0]``."""

    @abstractmethod
    def vector_between(self, i: int, j: int, result: Optional[Vec4] = None) -> Optional[Vec4]:
        """Return the vector from element ``i`` to element ``j``."""

    @abstractmethod
    def vector_from_origin(self, origin: Sequence[float], j: int,
                           result: Optional[Vec4] = None) -> Optional[Vec4]:
        """Return the vector from an external ``origin`` to element ``j``."""

    @abstractmethod
    def cross_product_of_targets(self, origin_index: int, target_a: int, target_b: int,
                                 result: Optional[Vec4] = None) -> Optional[Vec4]:
        """Return ``(a - origin) x (b - origin)`` for indexed origin and targets."""

    @abstractmethod
    def cross_product_from_origin(self, origin: Sequence[float], target_a: int, target_b: int,
                                  result: Optional[Vec4] = None) -> Optional[Vec4]:
        """Return ``(a - origin) x (b - origin)`` for an external origin."""

    @abstractmethod
    def accumulate_cross_product_of_targets(self, origin_index: int, target_a: int,
                                            target_b: int, accumulator: Vec4) -> None:
        """Add ``(a - origin) x (b - origin)`` into ``accumulator``."""

    @abstractmethod
    def accumulate_scaled_xyz(self, index: int, scale: float, total: Vec4) -> None:
        """Add ``scale`` times element ``index`` into ``total``."""


def _z(p):
    # 2-D vertices lie in z = 0
    return p[2] if len(p) > 2 else 0.0


class PointArrayCarrier(IndexedXYZCollection):
    """Carry a reference to a caller's sequence of points.

    The sequence is captured, not copied, and may be replaced through
    :attr:`data` at any time; there is no cached state to refresh.
    Elements only need ``[0]`` and ``[1]`` to be readable; a missing
    ``[2]`` reads as zero, so 2-D vertex lists work as they are.
    """

    def __init__(self, data: Sequence[Sequence[float]]):
        self.data = data

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return 'PointArrayCarrier({} points)'.format(len(self.data))

    def point_at(self, index, result=None):
        if not self.is_valid_index(index):
            return None
        p = self.data[index]
        return vset(result, p[0], p[1], _z(p), 1.0)

    def vector_at(self, index, result=None):
        if not self.is_valid_index(index):
            return None
        p = self.data[index]
        return vset(result, p[0], p[1], _z(p), 0.0)

    def vector_between(self, i, j, result=None):
        if not (self.is_valid_index(i) and self.is_valid_index(j)):
            return None
        a = self.data[i]
        b = self.data[j]
        return vset(result, b[0] - a[0], b[1] - a[1], _z(b) - _z(a), 0.0)

    def vector_from_origin(self, origin, j, result=None):
        if not self.is_valid_index(j):
            return None
        b = self.data[j]
        return vset(result, b[0] - origin[0], b[1] - origin[1], _z(b) - _z(origin), 0.0)

    def cross_product_of_targets(self, origin_index, target_a, target_b, result=None):
        if not self.is_valid_index(origin_index):
            return None
        return self.cross_product_from_origin(self.data[origin_index], target_a, target_b, result)

    def cross_product_from_origin(self, origin, target_a, target_b, result=None):
        if not (self.is_valid_index(target_a) and self.is_valid_index(target_b)):
            return None
        a = self.data[target_a]
        b = self.data[target_b]
        return crossxyz(result,
                        a[0] - origin[0], a[1] - origin[1], _z(a) - _z(origin),
                        b[0] - origin[0], b[1] - origin[1], _z(b) - _z(origin))

    def accumulate_cross_product_of_targets(self, origin_index, target_a, target_b, accumulator):
        if (self.is_valid_index(origin_index) and self.is_valid_index(target_a)
                and self.is_valid_index(target_b)):
            o = self.data[origin_index]
            a = self.data[target_a]
            b = self.data[target_b]
            ux, uy, uz = a[0] - o[0], a[1] - o[1], _z(a) - _z(o)
            vx, vy, vz = b[0] - o[0], b[1] - o[1], _z(b) - _z(o)
            accumulator[0] += uy * vz - uz * vy
            accumulator[1] += uz * vx - ux * vz
            accumulator[2] += ux * vy - uy * vx

    def accumulate_scaled_xyz(self, index, scale, total):
        if self.is_valid_index(index):
            p = self.data[index]
            total[0] += scale * p[0]
            total[1] += scale * p[1]
            total[2] += scale * _z(p)


def as_collection(points) -> IndexedXYZCollection:
    """Return ``points`` if it already is a collection, else wrap it."""

    if isinstance(points, IndexedXYZCollection):
        return points
    return PointArrayCarrier(points)


__all__ = [
    'IndexedXYZCollection',
    'PointArrayCarrier',
    'as_collection',
]
