"""Area, normal, centroid, moment, convexity and containment queries on
polygons.

A polygon here is any :class:`~geomcore.collection.IndexedXYZCollection`
(or plain sequence of points, which is wrapped on the fly) read as a
closed ring.  The ring may or may not repeat its first point at the
end; every function gives the same answer either way.  Nothing here
mutates its input.

Degenerate rings (collinear, zero area, self intersecting) never raise.
Callers get ``None`` or :attr:`Parity.INDETERMINATE` when no sensible
answer exists, and a best-effort number otherwise.

The fan sums all work from vertex 0: the triangle ``(p0, p[i-1], p[i])``
contributes ``(p[i-1] - p0) x (p[i] - p0)``.  The sum is signed, so
the area normal of a counterclockwise ring points toward the viewer
and a bowtie largely cancels itself.

Scratch vectors and matrices are kept per thread (see
:func:`_scratch`) and overwritten by each call.  The public functions
that use them do not call one another while the scratch is live, so
they are safe to use from any number of threads but must not be
re-entered from a callback within one call.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import IntEnum
from math import cos, hypot, sin
from typing import List, Optional, Sequence, Tuple

import numpy as np

from geomcore.collection import as_collection
from geomcore.geom import (conditional_divide, cross, dot, mag, normalize,
                           point, small_angle, vector, vset)

logger = logging.getLogger(__name__)

## integrated products [xx, xy, xz, x; yx, yy, yz, y; ...; x, y, z, 1]
## over the unit right triangle (0,0), (1,0), (0,1)
TRIANGLE_MOMENT_WEIGHTS = np.array(
    [[2.0, 1.0, 0.0, 4.0],
     [1.0, 2.0, 0.0, 4.0],
     [0.0, 0.0, 0.0, 0.0],
     [4.0, 4.0, 0.0, 12.0]]) / 24.0

## the same over the unit tetrahedron (0,0,0), (1,0,0), (0,1,0), (0,0,1)
TETRAHEDRON_MOMENT_WEIGHTS = np.array(
    [[1.0 / 60.0, 1.0 / 120.0, 1.0 / 120.0, 1.0 / 24.0],
     [1.0 / 120.0, 1.0 / 60.0, 1.0 / 120.0, 1.0 / 24.0],
     [1.0 / 120.0, 1.0 / 120.0, 1.0 / 60.0, 1.0 / 24.0],
     [1.0 / 24.0, 1.0 / 24.0, 1.0 / 24.0, 1.0 / 6.0]])

## ray cast fallback: directions at multiples of an angle that never
## lines up with itself, capped at a fixed number of tries
RAY_ANGLE_STEP = 0.276234342921378
RAY_CAST_ATTEMPTS = 10


class Parity(IntEnum):
    """Point classification against a polygon."""

    INTERIOR = 1
    BOUNDARY = 0
    EXTERIOR = -1
    INDETERMINATE = -2


@dataclass(frozen=True)
class CentroidAreaNormal:
    """Centroid, unit normal and (unsigned) area of a planar polygon."""

    centroid: List[float]
    normal: List[float]
    area: float


class _Scratch:
    """One instance per thread; every call that uses it overwrites it."""

    def __init__(self):
        self.vector0 = vector()
        self.vector1 = vector()
        self.vector2 = vector()
        self.normal = vector()
        self.placement = np.identity(4)


_local = threading.local()


def _scratch() -> _Scratch:
    """Per-thread reusable vectors and matrices, created on first use."""
    s = getattr(_local, 'scratch', None)
    if s is None:
        s = _local.scratch = _Scratch()
    return s


## areas and normals
## -----------------

def sum_triangle_areas(points) -> float:
    """Sum of the unsigned areas of the fan triangles from vertex 0."""
    pts = as_collection(points)
    cross_vector = vector()
    s = 0.0
    for i in range(2, len(pts)):
        pts.cross_product_of_targets(0, i - 1, i, cross_vector)
        s += mag(cross_vector)
    return 0.5 * s


def sum_triangle_areas_xy(points) -> float:
    """Sum of the unsigned xy-projected areas of the fan triangles."""
    pts = as_collection(points)
    cross_vector = vector()
    s = 0.0
    for i in range(2, len(pts)):
        pts.cross_product_of_targets(0, i - 1, i, cross_vector)
        s += abs(cross_vector[2])
    return 0.5 * s


def area_normal(points, result: Optional[List[float]] = None) -> List[float]:
    """Vector perpendicular to the polygon whose length is its area.

    Rings with fewer than three points have a zero area normal.
    """
    pts = as_collection(points)
    n = len(pts)
    if n == 3:
        result = pts.cross_product_of_targets(0, 1, 2, result)
    else:
        result = vset(result, 0.0, 0.0, 0.0, 0.0)
        for i in range(2, n):
            pts.accumulate_cross_product_of_targets(0, i - 1, i, result)
    result[0] *= 0.5
    result[1] *= 0.5
    result[2] *= 0.5
    return result


def area(points) -> float:
    """Unsigned area of a planar polygon in any orientation."""
    return mag(area_normal(points))


def area_xy(points) -> float:
    """Signed area of the xy projection; negative for clockwise rings."""
    pts = as_collection(points)
    s = 0.0
    p0 = pts.point_at(0)
    if p0 is None:
        return 0.0
    u = vector()
    v = vector()
    for i in range(2, len(pts)):
        pts.vector_from_origin(p0, i - 1, u)
        pts.vector_from_origin(p0, i, v)
        s += u[0] * v[1] - u[1] * v[0]
    return 0.5 * s


def unit_normal(points, result: Optional[List[float]] = None) -> Optional[List[float]]:
    """Unit normal of the polygon, or ``None`` if it has no clear one.

    Quadrilaterals use the cross product of the diagonals, which is less
    sensitive to which vertex starts the ring.
    """
    pts = as_collection(points)
    n = len(pts)
    if n < 3:
        return None
    if n == 3:
        raw = pts.cross_product_of_targets(0, 1, 2)
    elif n == 4:
        s = _scratch()
        pts.vector_between(0, 2, s.vector0)
        pts.vector_between(1, 3, s.vector1)
        raw = cross(s.vector0, s.vector1)
    else:
        raw = area_normal(pts)
    return normalize(raw, result)


## centroids
## ---------

def centroid_area_normal(points) -> Optional[CentroidAreaNormal]:
    """Area-weighted centroid, unit normal and area of a planar polygon.

    Each fan triangle's centroid is weighted by its own signed area, so
    non-convex rings come out right.  Returns ``None`` when the area is
    too small to divide by.
    """
    pts = as_collection(points)
    n = len(pts)
    if n < 3:
        return None
    origin = pts.point_at(0)
    if n == 3:
        raw = pts.cross_product_of_targets(0, 1, 2)
        a = 0.5 * mag(raw)
        normal = normalize(raw)
        if normal is None:
            logger.debug('degenerate triangle, no centroid')
            return None
        centroid = point(origin)
        pts.accumulate_scaled_xyz(1, 1.0, centroid)
        pts.accumulate_scaled_xyz(2, 1.0, centroid)
        for k in range(3):
            centroid[k] /= 3.0
        return CentroidAreaNormal(centroid, normal, a)

    direction = area_normal(pts)
    direction = normalize(direction) or vector()

    vector0 = pts.vector_from_origin(origin, 1)
    vector1 = vector()
    cross_vector = vector()
    centroid_sum = [0.0, 0.0, 0.0]
    normal_sum = [0.0, 0.0, 0.0]
    for i in range(2, n):
        pts.vector_from_origin(origin, i, vector1)
        cross(vector0, vector1, cross_vector)
        # twice the signed triangle area
        b = dot(direction, cross_vector) / 6.0
        for k in range(3):
            normal_sum[k] += cross_vector[k]
            centroid_sum[k] += b * (vector0[k] + vector1[k])
        vset(vector0, vector1[0], vector1[1], vector1[2], 0.0)

    a = 0.5 * mag(normal_sum)
    inverse = conditional_divide(1.0, a)
    if inverse is None:
        logger.debug('polygon area %g too small for a centroid', a)
        return None
    centroid = point(origin[0] + inverse * centroid_sum[0],
                     origin[1] + inverse * centroid_sum[1],
                     origin[2] + inverse * centroid_sum[2])
    normal = normalize(normal_sum) or vector()
    return CentroidAreaNormal(centroid, normal, a)


def centroid_area_xy(points) -> Optional[Tuple[List[float], float]]:
    """Centroid and signed area of the xy projection, or ``None`` when
    the area is too small to divide by."""
    pts = as_collection(points)
    n = len(pts)
    if n < 3:
        return None
    origin = pts.point_at(0)
    u = vector()
    v = vector()
    sx = sy = 0.0
    area_sum = 0.0
    for i in range(1, n - 1):
        pts.vector_from_origin(origin, i, u)
        pts.vector_from_origin(origin, i + 1, v)
        c = u[0] * v[1] - u[1] * v[0]
        sx += (u[0] + v[0]) * c
        sy += (u[1] + v[1]) * c
        area_sum += c
    a = 0.5 * area_sum
    f = conditional_divide(1.0, 6.0 * a)
    if f is None:
        logger.debug('xy area %g too small for a centroid', a)
        return None
    return point(origin[0] + f * sx, origin[1] + f * sy, origin[2]), a


## second moments
## --------------

def _accumulate_transformed_products(weights, pts, origin, volume, moments):
    s = _scratch()
    normal = unit_normal(pts, s.normal)
    if normal is None:
        logger.debug('no unit normal, moments unchanged')
        return
    # the sign of each detJ follows the polygon normal, so triangles
    # that fold back over the ring subtract
    vector01 = s.vector0
    vector02 = s.vector1
    vector03 = s.vector2
    placement = s.placement
    p0 = pts.point_at(0)
    for i in range(2, len(pts)):
        if volume:
            pts.vector_from_origin(origin, 0, vector01)
            pts.vector_from_origin(origin, i - 1, vector02)
            pts.vector_from_origin(origin, i, vector03)
            det_j = dot(vector01, cross(vector02, vector03))
            base = (0.0, 0.0, 0.0)
        else:
            pts.vector_between(0, i - 1, vector01)
            pts.vector_between(0, i, vector02)
            vset(vector03, normal[0], normal[1], normal[2], 0.0)
            det_j = dot(normal, cross(vector01, vector02))
            base = (p0[0] - origin[0], p0[1] - origin[1], p0[2] - origin[2])
        placement[:3, 0] = vector01[:3]
        placement[:3, 1] = vector02[:3]
        placement[:3, 2] = vector03[:3]
        placement[:3, 3] = base[:3]
        moments += det_j * (placement @ weights @ placement.T)


def accumulate_second_moment_products(points, origin: Sequence[float], moments: np.ndarray) -> None:
    """Add the area moment products of the polygon about ``origin`` into
    the caller's 4x4 ``moments`` array.

    Entry ``[i, j]`` for ``i, j < 3`` accumulates the integral of
    ``x_i * x_j`` over the area, ``[i, 3]`` the integral of ``x_i``,
    and ``[3, 3]`` the area itself, all measured from ``origin``.  Each
    fan triangle contributes with the sign of its Jacobian relative to
    the polygon normal, which keeps non-convex rings exact.  A polygon
    without a usable normal adds nothing.
    """
    _accumulate_transformed_products(TRIANGLE_MOMENT_WEIGHTS, as_collection(points),
                                     origin, False, moments)


def accumulate_second_moment_volume_products(points, origin: Sequence[float],
                                             moments: np.ndarray) -> None:
    """Add the volume moment products of the cone from ``origin`` to the
    polygon's fan triangles into ``moments``.  Summed over the faces of
    a closed, consistently oriented mesh this gives the moments of the
    enclosed volume."""
    _accumulate_transformed_products(TETRAHEDRON_MOMENT_WEIGHTS, as_collection(points),
                                     origin, True, moments)


## convexity
## ---------

def turning_directions_xy(points) -> int:
    """Test the direction of turn at every vertex, ignoring z.

    Returns 1 if every turn is to the left (convex, counterclockwise),
    -1 if every turn is to the right (convex, clockwise), and 0 if any
    turn is reversed or straight to within ``small_angle``.  Trailing
    copies of the first point are ignored.  A ring that winds more than once can pass this test
    without being convex.
    """
    pts = as_collection(points)
    xy = [pts.point_at(i)[:2] for i in range(len(pts))]
    num_point = len(xy)
    last = num_point - 1
    while last > 1 and xy[last][0] == xy[0][0] and xy[last][1] == xy[0][1]:
        num_point = last
        last -= 1
    if num_point <= 2:
        return 0
    u = (xy[last][0] - xy[last - 1][0], xy[last][1] - xy[last - 1][1])
    v = (xy[0][0] - xy[last][0], xy[0][1] - xy[last][1])
    base = _turn(u, v)
    for i in range(1, num_point):
        u = v
        v = (xy[i][0] - xy[i - 1][0], xy[i][1] - xy[i - 1][1])
        if _turn(u, v) * base <= 0.0:
            return 0
    return 1 if base > 0.0 else -1


def _turn(u, v):
    # z of u x v, or zero when the edges are parallel to within small_angle
    c = u[0] * v[1] - u[1] * v[0]
    if abs(c) <= small_angle * hypot(u[0], u[1]) * hypot(v[0], v[1]):
        return 0.0
    return c


## point classification
## --------------------

def _xy_lists(points):
    pts = as_collection(points)
    scratch = vector()
    xs = []
    ys = []
    for i in range(len(pts)):
        pts.point_at(i, scratch)
        xs.append(scratch[0])
        ys.append(scratch[1])
    return xs, ys


def _parity_from_heights(heights, along, target, tol):
    """Count crossings of a line through the query point.

    ``heights`` are the signed offsets of each vertex from the line,
    ``along`` the vertex coordinates measured along it, and ``target``
    the query's own coordinate along the line.  Returns ``None`` if any
    vertex is within ``tol`` of the line.
    """
    n = len(heights)
    h0 = heights[n - 1]
    if abs(h0) <= tol:
        return None
    num_left = 0
    for i in range(n):
        h1 = heights[i]
        if abs(h1) <= tol:
            return None
        if h0 * h1 < 0.0:
            s = -h0 / (h1 - h0)
            c0 = along[i - 1]
            crossing = c0 + s * (along[i] - c0)
            if abs(crossing - target) <= tol:
                return Parity.BOUNDARY
            if crossing < target:
                num_left += 1
        h0 = h1
    return Parity.INTERIOR if num_left & 1 else Parity.EXTERIOR


def parity_y_test(p: Sequence[float], points, tol: float = 0.0) -> Optional[Parity]:
    """Classify ``p`` with a ray parallel to the x axis.  ``None`` if any
    vertex has a y coordinate within ``tol`` of ``p``'s."""
    xs, ys = _xy_lists(points)
    if not xs:
        return None
    return _parity_from_heights([p[1] - y for y in ys], xs, p[0], tol)


def parity_x_test(p: Sequence[float], points, tol: float = 0.0) -> Optional[Parity]:
    """Classify ``p`` with a ray parallel to the y axis.  ``None`` if any
    vertex has an x coordinate within ``tol`` of ``p``'s."""
    xs, ys = _xy_lists(points)
    if not xs:
        return None
    return _parity_from_heights([p[0] - x for x in xs], ys, p[1], tol)


def _parity_vector(px, py, theta, xs, ys, tol):
    tx = cos(theta)
    ty = sin(theta)
    heights = [-ty * (x - px) + tx * (y - py) for x, y in zip(xs, ys)]
    along = [tx * (x - px) + ty * (y - py) for x, y in zip(xs, ys)]
    return _parity_from_heights(heights, along, 0.0, tol)


def parity_vector_test(p: Sequence[float], theta: float, points,
                       tol: float = 0.0) -> Optional[Parity]:
    """Classify ``p`` with a ray at angle ``theta`` (radians) from the x
    axis.  ``None`` if any vertex is within ``tol`` of the ray's line."""
    xs, ys = _xy_lists(points)
    if not xs:
        return None
    return _parity_vector(p[0], p[1], theta, xs, ys, tol)


def classify_point_parity(p: Sequence[float], points, tol: float = 0.0) -> Parity:
    """Classify ``p`` against the xy projection of a polygon by crossing
    parity.

    Axis-aligned rays are tried first, then rays at a sequence of odd
    angles.  A crossing within ``tol`` of ``p`` means BOUNDARY, which
    wins over parity.  If no ray avoids every vertex the answer is
    INDETERMINATE; the function never guesses.
    """
    xs, ys = _xy_lists(points)
    if not xs:
        raise ValueError('cannot classify a point against an empty polygon')
    x = p[0]
    y = p[1]
    if len(xs) < 2:
        if abs(x - xs[0]) <= tol and abs(y - ys[0]) <= tol:
            return Parity.BOUNDARY
        return Parity.EXTERIOR

    parity = _parity_from_heights([y - v for v in ys], xs, x, tol)
    if parity is not None:
        return parity
    parity = _parity_from_heights([x - u for u in xs], ys, y, tol)
    if parity is not None:
        return parity

    for u, v in zip(xs, ys):
        if abs(x - u) <= tol and abs(y - v) <= tol:
            return Parity.BOUNDARY

    for k in range(1, RAY_CAST_ATTEMPTS + 1):
        parity = _parity_vector(x, y, k * RAY_ANGLE_STEP, xs, ys, tol)
        if parity is not None:
            return parity
    logger.debug('no ray from (%g, %g) avoided the polygon vertices', x, y)
    return Parity.INDETERMINATE


__all__ = [
    'CentroidAreaNormal',
    'Parity',
    'RAY_ANGLE_STEP',
    'RAY_CAST_ATTEMPTS',
    'TETRAHEDRON_MOMENT_WEIGHTS',
    'TRIANGLE_MOMENT_WEIGHTS',
    'accumulate_second_moment_products',
    'accumulate_second_moment_volume_products',
    'area',
    'area_normal',
    'area_xy',
    'centroid_area_normal',
    'centroid_area_xy',
    'classify_point_parity',
    'parity_vector_test',
    'parity_x_test',
    'parity_y_test',
    'sum_triangle_areas',
    'sum_triangle_areas_xy',
    'turning_directions_xy',
    'unit_normal',
]
