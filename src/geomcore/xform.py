## affine transformation matrices for 3D homogeneous coordinates in
## geomcore

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

import logging
from math import *

import numpy as np

import geomcore.geom as geom

logger = logging.getLogger(__name__)

## a matrix is a 4x4 array of doubles. Rows are rows unless the
## transpose flag is set, in which case every accessor reads the
## stored array as its transpose.  Points are treated as column
## vectors, so M.mul(p) computes Mp.

## Only the affine part is used by the coordinate buffers: the upper
## 3x3 block is the linear map and the fourth column is the
## translation.  The bottom row is carried along for generality but
## is ignored when transforming packed coordinates.


class Matrix:
    """4x4 transformation matrix class for transforming homogeneous 3D coordinates"""

    def __init__(self,a=None,trans=False):
        self.m = np.identity(4,dtype=np.float64)
        self.trans = False

        if isinstance(a,Matrix):
            self.m[:,:] = a.array()
        elif isinstance(a,(tuple,list)):
            if len(a) == 4 and all(isinstance(r,(tuple,list)) and len(r) == 4 for r in a):
                values = [x for r in a for x in r]
            elif len(a) == 16:
                values = list(a)
            else:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
            for ind,x in enumerate(values):
                if not geom.isgoodnum(x):
                    raise ValueError('bad element in matrix initialization: {}'.format(x))
                self.m[ind // 4, ind % 4] = x
        elif a is not None:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
        self.trans = trans

    def __repr__(self):
        rows = [list(map(float,r)) for r in self.m]
        return "Matrix({},{},{},{},{})".format(rows[0],rows[1],
                                               rows[2],rows[3],self.trans)

    def _check(self,i,j,what):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to {}: {},{}'.format(what,i,j))

    def get(self,i,j):
        self._check(i,j,'get')
        if self.trans:
            return float(self.m[j,i])
        return float(self.m[i,j])

    def set(self,i,j,x):
        self._check(i,j,'set')
        if not geom.isgoodnum(x):
            raise ValueError('bad value passed to set: {}'.format(x))
        if self.trans:
            self.m[j,i] = x
        else:
            self.m[i,j] = x

    def getrow(self,i):
        self._check(i,0,'getrow')
        return [self.get(i,j) for j in range(4)]

    def getcol(self,j):
        self._check(0,j,'getcol')
        return [self.get(i,j) for i in range(4)]

    def array(self):
        """return a numpy copy of the matrix, honoring the transpose flag"""
        if self.trans:
            return self.m.T.copy()
        return self.m.copy()

    # matrix multiply.  If x is a matrix, compute MX.  If x is a
    # vector, compute Mx. If x is a scalar, compute xM.  Respects
    # transpose flag.
    def mul(self,x):
        if isinstance(x,Matrix):
            return Matrix(list((self.array() @ x.array()).flatten()))
        elif geom.isvect(x):
            return [float(v) for v in self.array() @ np.asarray(x,dtype=np.float64)]
        elif geom.isgoodnum(x):
            return Matrix(list((self.array() * x).flatten()))
        raise ValueError('bad thing passed to mul(): {}'.format(x))

    def transform_point(self,p,result=None):
        """apply the affine part of the matrix to point ``p``"""
        a = self.array()
        x,y,z = p[0],p[1],p[2]
        return geom.vset(result,
                         float(a[0,0]*x + a[0,1]*y + a[0,2]*z + a[0,3]),
                         float(a[1,0]*x + a[1,1]*y + a[1,2]*z + a[1,3]),
                         float(a[2,0]*x + a[2,1]*y + a[2,2]*z + a[2,3]),
                         1.0)

    def transform_vector(self,v,result=None):
        """apply the linear part of the matrix to direction vector ``v``"""
        a = self.array()
        x,y,z = v[0],v[1],v[2]
        return geom.vset(result,
                         float(a[0,0]*x + a[0,1]*y + a[0,2]*z),
                         float(a[1,0]*x + a[1,1]*y + a[1,2]*z),
                         float(a[2,0]*x + a[2,1]*y + a[2,2]*z),
                         0.0)

    def linear(self):
        """return the 3x3 linear block and the translation column"""
        a = self.array()
        return a[:3,:3], a[:3,3]

    def inverse(self):
        """return the inverse affine map, or ``None`` if the linear part
        is singular"""
        lin,origin = self.linear()
        inv = invert3(lin)
        if inv is None:
            logger.debug('singular linear part, no inverse: %r',self)
            return None
        result = np.identity(4,dtype=np.float64)
        result[:3,:3] = inv
        result[:3,3] = -(inv @ origin)
        return Matrix(list(result.flatten()))


def invert3(lin,tol=geom.large_fraction**-1):
    """invert a 3x3 numpy block, or return ``None`` if its determinant
    is negligible relative to the cube of its largest entry"""
    scale = float(np.abs(lin).max())
    if scale == 0.0:
        return None
    det = float(np.linalg.det(lin))
    if abs(det) <= tol * scale**3:
        return None
    return np.linalg.inv(lin)


# return the generalized 4x4 arbitrary axis rotation matrix, angle in
# degrees
def Rotation(axis,angle,inverse=False):
    m = geom.mag(axis)
    if m < geom.epsilon:
        raise ValueError('zero-length rotation axis not allowed')
    ux = axis[0]/m
    uy = axis[1]/m
    uz = axis[2]/m

    if inverse:
        angle *= -1.0
    rad = (angle%360.0)*geom.pi2/360.0

    cang = cos(rad)
    cmin = 1.0-cang
    sang = sin(rad)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = [[cang + ux*ux*cmin, ux*uy*cmin-uz*sang, ux*uz*cmin+uy*sang,0],
         [uy*ux*cmin+uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang,0],
         [uz*ux*cmin-uy*sang, uz*uy*cmin+ux*sang, cang+uz*uz*cmin,0],
         [0,0,0,1]]

    return Matrix(R)

def Translation(delta,inverse=False):
    s = -1.0 if inverse else 1.0
    T = [[1,0,0,s*delta[0]],
         [0,1,0,s*delta[1]],
         [0,0,1,s*delta[2]],
         [0,0,0,1]]
    return Matrix(T)

def Scale(x,y=False,z=False,inverse=False):
    if geom.isgoodnum(x):
        sx = x
        if geom.isgoodnum(y) and geom.isgoodnum(z):
            sy = y
            sz = z
        else:
            sy = sz = x
    elif geom.isvect(x):
        sx,sy,sz = x[0],x[1],x[2]
    else:
        raise ValueError('bad scaling values passed to Scale')

    if inverse:
        if sx == 0 or sy == 0 or sz == 0:
            raise ValueError('zero scale factor has no inverse')
        sx = 1.0/sx
        sy = 1.0/sy
        sz = 1.0/sz

    S = [[sx,0,0,0],
         [0,sy,0,0],
         [0,0,sz,0],
         [0,0,0,1.0]]
    return Matrix(S)
