"""Packed, growable storage for XYZ coordinates.

:class:`GrowableXYZArray` keeps every coordinate in one contiguous
``float64`` numpy block laid out ``x0, y0, z0, x1, y1, z1, ...``.  The
block is sized to a point *capacity* and only the first ``len(self)``
points are meaningful.  Appending past capacity at least doubles the
block, truncating or clearing never reallocates, so a buffer that is
cleared and refilled in a loop settles at a fixed allocation.

Whole-buffer passes (transforms, range extension, plane tests, lengths)
run as single numpy expressions over a ``(n, 3)`` view of the block.

The array is safe to read from several threads at once provided no
thread mutates it meanwhile; there is no internal locking.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np

from geomcore.collection import IndexedXYZCollection, _z
from geomcore.geom import crossxyz, epsilon, vset, vstr
from geomcore.xform import invert3

logger = logging.getLogger(__name__)


class GrowableXYZArray(IndexedXYZCollection):
    """Growable array of XYZ points packed into a single float64 block."""

    def __init__(self, capacity: int = 8):
        if capacity < 0:
            raise ValueError('bad capacity passed to GrowableXYZArray: {}'.format(capacity))
        self._data = np.zeros(3 * capacity, dtype=np.float64)
        self._in_use = 0

    @classmethod
    def create(cls, points: Sequence[Sequence[float]]) -> 'GrowableXYZArray':
        """Return a tight array holding copies of ``points``."""
        result = cls(len(points))
        result.push_all(points)
        return result

    def __len__(self) -> int:
        return self._in_use

    def __repr__(self) -> str:
        return 'GrowableXYZArray({})'.format(vstr(self.to_points()))

    @property
    def capacity(self) -> int:
        """Number of points the current allocation can hold."""
        return len(self._data) // 3

    @property
    def float64_length(self) -> int:
        return 3 * self._in_use

    def _xyz(self) -> np.ndarray:
        # view, not a copy: writes go straight into the packed block
        n = self._in_use
        return self._data[:3 * n].reshape(n, 3)

    ## capacity management
    ## -------------------

    def ensure_capacity(self, capacity: int) -> None:
        """Grow (never shrink) the allocation to hold ``capacity`` points.
        Length and content are unchanged."""
        if capacity < 0:
            raise ValueError('bad capacity passed to ensure_capacity: {}'.format(capacity))
        if capacity > self.capacity:
            logger.debug('reallocating %d -> %d points', self.capacity, capacity)
            data = np.zeros(3 * capacity, dtype=np.float64)
            data[:3 * self._in_use] = self._data[:3 * self._in_use]
            self._data = data

    def resize(self, count: int) -> None:
        """Set the point count.

        Shrinking only moves the length; coordinates beyond it become
        garbage.  Growing exposes slots whose content is unspecified
        (whatever was there before, or zero for fresh storage).
        """
        if count < 0:
            raise ValueError('bad count passed to resize: {}'.format(count))
        if count > self.capacity:
            self.ensure_capacity(count)
        self._in_use = count

    def clear(self) -> None:
        """Forget all points, keeping the allocation."""
        self._in_use = 0

    def clone(self) -> 'GrowableXYZArray':
        """Copy the points in use.  The copy has no spare capacity."""
        result = GrowableXYZArray(self._in_use)
        result._data[:] = self._data[:3 * self._in_use]
        result._in_use = self._in_use
        return result

    ## appending and removing
    ## ----------------------

    def push_xyz(self, x: float, y: float, z: float) -> None:
        index = 3 * self._in_use
        if index >= len(self._data):
            self.ensure_capacity(max(2 * self.capacity, 4))
        data = self._data
        data[index] = x
        data[index + 1] = y
        data[index + 2] = z
        self._in_use += 1

    def push(self, p: Sequence[float]) -> None:
        self.push_xyz(p[0], p[1], _z(p))

    def push_all(self, points: Iterable[Sequence[float]]) -> None:
        for p in points:
            self.push_xyz(p[0], p[1], _z(p))

    def push_wrap(self, count: int) -> None:
        """Append copies of the first ``count`` points, e.g. to pad a ring
        with its closure point."""
        if count > self._in_use:
            raise ValueError('cannot wrap {} of {} points'.format(count, self._in_use))
        for i in range(count):
            k = 3 * i
            self.push_xyz(self._data[k], self._data[k + 1], self._data[k + 2])

    def push_from(self, source: 'GrowableXYZArray', index: int) -> bool:
        """Append point ``index`` of ``source``; False if the index is bad."""
        if not source.is_valid_index(index):
            return False
        k = 3 * index
        self.push_xyz(source._data[k], source._data[k + 1], source._data[k + 2])
        return True

    def pop(self) -> None:
        if self._in_use > 0:
            self._in_use -= 1

    ## element access
    ## --------------

    def set_coordinates(self, index: int, x: float, y: float, z: float) -> bool:
        if not self.is_valid_index(index):
            return False
        k = 3 * index
        self._data[k] = x
        self._data[k + 1] = y
        self._data[k + 2] = z
        return True

    def set_at(self, index: int, p: Sequence[float]) -> bool:
        return self.set_coordinates(index, p[0], p[1], _z(p))

    def transfer_from(self, dest_index: int, source: 'GrowableXYZArray', source_index: int) -> bool:
        """Overwrite point ``dest_index`` with point ``source_index`` of ``source``."""
        if not (self.is_valid_index(dest_index) and source.is_valid_index(source_index)):
            return False
        i = 3 * dest_index
        j = 3 * source_index
        self._data[i:i + 3] = source._data[j:j + 3]
        return True

    def component(self, index: int, axis: int) -> float:
        """Unchecked read of one coordinate."""
        return float(self._data[3 * index + axis])

    def point_at(self, index, result=None):
        if not self.is_valid_index(index):
            return None
        k = 3 * index
        d = self._data
        return vset(result, float(d[k]), float(d[k + 1]), float(d[k + 2]), 1.0)

    get_point_at = point_at

    def vector_at(self, index, result=None):
        if not self.is_valid_index(index):
            return None
        k = 3 * index
        d = self._data
        return vset(result, float(d[k]), float(d[k + 1]), float(d[k + 2]), 0.0)

    def front(self, result=None):
        return self.point_at(0, result)

    def back(self, result=None):
        return self.point_at(self._in_use - 1, result)

    def to_points(self) -> List[List[float]]:
        """Copy the points in use out as a list of ``[x, y, z, 1]`` points."""
        return [[x, y, z, 1.0] for x, y, z in self._xyz().tolist()]

    def interpolate(self, i: int, fraction: float, j: int, result=None):
        """Point at ``fraction`` of the way from point ``i`` to point ``j``."""
        if not (self.is_valid_index(i) and self.is_valid_index(j)):
            return None
        d = self._data
        a = 3 * i
        b = 3 * j
        f0 = 1.0 - fraction
        return vset(result,
                    float(f0 * d[a] + fraction * d[b]),
                    float(f0 * d[a + 1] + fraction * d[b + 1]),
                    float(f0 * d[a + 2] + fraction * d[b + 2]),
                    1.0)

    def distance(self, i: int, j: int) -> Optional[float]:
        if not (self.is_valid_index(i) and self.is_valid_index(j)):
            return None
        return float(np.linalg.norm(self._data[3 * j:3 * j + 3] - self._data[3 * i:3 * i + 3]))

    def distance_index_to_point(self, i: int, p: Sequence[float]) -> Optional[float]:
        if not self.is_valid_index(i):
            return None
        k = 3 * i
        d = self._data
        return float(np.sqrt((d[k] - p[0]) ** 2 + (d[k + 1] - p[1]) ** 2 + (d[k + 2] - _z(p)) ** 2))

    def move_index_to_index(self, from_index: int, to_index: int) -> bool:
        """Copy point ``from_index`` over point ``to_index``."""
        return self.transfer_from(to_index, self, from_index)

    def accumulate_scaled_xyz(self, index, scale, total):
        if self.is_valid_index(index):
            k = 3 * index
            d = self._data
            total[0] += scale * float(d[k])
            total[1] += scale * float(d[k + 1])
            total[2] += scale * float(d[k + 2])

    ## indexed vectors and cross products
    ## ----------------------------------

    def vector_between(self, i, j, result=None):
        if not (self.is_valid_index(i) and self.is_valid_index(j)):
            return None
        d = self._data
        a = 3 * i
        b = 3 * j
        return vset(result,
                    float(d[b] - d[a]),
                    float(d[b + 1] - d[a + 1]),
                    float(d[b + 2] - d[a + 2]),
                    0.0)

    def vector_from_origin(self, origin, j, result=None):
        if not self.is_valid_index(j):
            return None
        d = self._data
        b = 3 * j
        return vset(result,
                    float(d[b] - origin[0]),
                    float(d[b + 1] - origin[1]),
                    float(d[b + 2] - _z(origin)),
                    0.0)

    def cross_product_of_targets(self, origin_index, target_a, target_b, result=None):
        if not self.is_valid_index(origin_index):
            return None
        k = 3 * origin_index
        d = self._data
        return self.cross_product_from_origin((d[k], d[k + 1], d[k + 2]),
                                              target_a, target_b, result)

    def cross_product_from_origin(self, origin, target_a, target_b, result=None):
        if not (self.is_valid_index(target_a) and self.is_valid_index(target_b)):
            return None
        d = self._data
        a = 3 * target_a
        b = 3 * target_b
        x0, y0, z0 = float(origin[0]), float(origin[1]), float(_z(origin))
        return crossxyz(result,
                        float(d[a]) - x0, float(d[a + 1]) - y0, float(d[a + 2]) - z0,
                        float(d[b]) - x0, float(d[b + 1]) - y0, float(d[b + 2]) - z0)

    def accumulate_cross_product_of_targets(self, origin_index, target_a, target_b, accumulator):
        if (self.is_valid_index(origin_index) and self.is_valid_index(target_a)
                and self.is_valid_index(target_b)):
            d = self._data
            o = 3 * origin_index
            a = 3 * target_a
            b = 3 * target_b
            ux = float(d[a] - d[o])
            uy = float(d[a + 1] - d[o + 1])
            uz = float(d[a + 2] - d[o + 2])
            vx = float(d[b] - d[o])
            vy = float(d[b + 1] - d[o + 1])
            vz = float(d[b + 2] - d[o + 2])
            accumulator[0] += uy * vz - uz * vy
            accumulator[1] += uz * vx - ux * vz
            accumulator[2] += ux * vy - uy * vx

    ## whole-buffer passes
    ## -------------------

    def transform_in_place(self, m) -> None:
        """Replace every point ``p`` by ``m`` applied to ``p``.  Only the
        affine part of ``m`` is used."""
        lin, origin = m.linear()
        xyz = self._xyz()
        xyz[:, :] = xyz @ lin.T + origin

    def multiply_matrix3d_in_place(self, m) -> None:
        """Apply only the 3x3 linear part of ``m``, treating each point as
        a vector.  Translation is ignored."""
        lin, _ = m.linear()
        xyz = self._xyz()
        xyz[:, :] = xyz @ lin.T

    def scale_in_place(self, factor: float) -> None:
        self._xyz()[:, :] *= factor

    def reverse_in_place(self) -> None:
        """Reverse the point order, e.g. to flip a ring's orientation."""
        xyz = self._xyz()
        xyz[:, :] = xyz[::-1].copy()

    def try_transform_inverse_in_place(self, m) -> bool:
        """Replace every point by the inverse of ``m`` applied to it.

        Returns False, leaving the points untouched, if the linear part
        of ``m`` is singular.
        """
        lin, origin = m.linear()
        inverse = invert3(lin)
        if inverse is None:
            logger.debug('singular transform, buffer of %d points left unchanged', self._in_use)
            return False
        xyz = self._xyz()
        xyz[:, :] = (xyz - origin) @ inverse.T
        return True

    def extend_range(self, bbox=None, m=None):
        """Extend bounding box ``bbox`` to cover the points, optionally
        after transforming them by ``m``.

        ``bbox`` is updated in place and returned.  If it is ``None`` a
        new box is returned, or ``None`` when the array is empty.
        """
        if self._in_use == 0:
            return bbox
        xyz = self._xyz()
        if m is not None:
            lin, origin = m.linear()
            xyz = xyz @ lin.T + origin
        low = xyz.min(axis=0).tolist()
        high = xyz.max(axis=0).tolist()
        if bbox is None:
            return [low + [1.0], high + [1.0]]
        for i in range(3):
            bbox[0][i] = min(bbox[0][i], low[i])
            bbox[1][i] = max(bbox[1][i], high[i])
        return bbox

    def get_range(self, m=None):
        """Bounding box of the points, or ``None`` for an empty array."""
        return self.extend_range(None, m)

    def sum_of_segment_lengths(self) -> float:
        """Length of the polyline through the points, in order."""
        if self._in_use < 2:
            return 0.0
        return float(np.linalg.norm(np.diff(self._xyz(), axis=0), axis=1).sum())

    def is_within_tolerance_of_plane(self, plane, tol: float = epsilon) -> bool:
        """True if every point is within ``tol`` of ``plane``, given as
        ``[p0, n]`` with unit normal ``n``."""
        p0, n = plane
        altitude = (self._xyz() - np.asarray(p0[:3], dtype=np.float64)) @ \
            np.asarray(n[:3], dtype=np.float64)
        return bool(np.all(np.abs(altitude) <= tol))

    def signed_area_xy(self) -> float:
        """Signed area of the xy projection, treating the points as a ring.
        A trailing copy of the first point is harmless."""
        if self._in_use < 3:
            return 0.0
        xyz = self._xyz()
        u = xyz[1:, 0] - xyz[0, 0]
        v = xyz[1:, 1] - xyz[0, 1]
        return 0.5 * float(np.sum(u[:-1] * v[1:] - v[:-1] * u[1:]))

    def lexical_sort_indices(self) -> List[int]:
        """Indices of the points sorted by x, then y, then z.  Duplicate
        points keep their original relative order."""
        xyz = self._xyz()
        # lexsort is stable; its last key is the primary one
        return np.lexsort((xyz[:, 2], xyz[:, 1], xyz[:, 0])).tolist()

    @staticmethod
    def is_almost_equal(a: Optional['GrowableXYZArray'], b: Optional['GrowableXYZArray'],
                        tol: float = epsilon) -> bool:
        """Compare two arrays point by point.  Two ``None`` are equal."""
        if a is None or b is None:
            return a is None and b is None
        if len(a) != len(b):
            return False
        return bool(np.all(np.linalg.norm(a._xyz() - b._xyz(), axis=1) <= tol))


__all__ = ['GrowableXYZArray']
