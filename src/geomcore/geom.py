## tolerance constants and vector helpers for geomcore
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

"""tolerance constants and small vector toolkit for **geomcore**

constants
=========

``epsilon`` is the small metric distance used for "is this
effectively zero" decisions on coordinates, and ``epsilon2`` is its
square, used wherever squared distances or cross product magnitudes
are compared.  ``small_angle`` is the matching angular tolerance in
radians (a turn through less than it counts as straight), and
``large_fraction`` bounds the quotient that ``conditional_divide()``
is willing to return.  Redefine these at
your peril; every operation that depends on a tolerance also takes it
as a keyword argument.

points and vectors
==================

A point is a list of four numbers ``[x, y, z, w]`` with ``w > 0``
(normally ``w == 1``).  A direction vector lies in the ``w == 0``
hyperplane, ``[x, y, z, 0]``, so that it is never mistaken for a
point and does not pick up the translation part of a transform.
Most operations here ignore ``w`` entirely.

Many functions accept an optional ``result`` list.  When it is
supplied the answer is written into it and it is returned, which lets
tight loops reuse a scratch list instead of allocating one per call.
See ``vset()``.
"""

from math import *

## constants
epsilon = 1.0e-6
epsilon2 = epsilon*epsilon
small_angle = 1.0e-12
large_fraction = 1.0e10
pi2 = 2.0*pi

## operations on scalars
## -----------------------

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n,bool)) and isinstance(n,(int,float))

def conditional_divide(numerator,denominator):
    """return ``numerator/denominator``, or ``None`` if the quotient
    would exceed ``large_fraction`` in magnitude"""
    if abs(denominator) * large_fraction > abs(numerator):
        return numerator / denominator
    return None

## construction
## ------------

def vect(a=False,b=False,c=False,d=False):
    """Convenience function for making a homogeneous coordinates 4 vector
from practically anything
    """
    r = [0,0,0,1]
    if isgoodnum(a):
        r[0]=a
        if isgoodnum(b):
            r[1]=b
            if isgoodnum(c):
                r[2]=c
                if isgoodnum(d):
                    r[3]=d
    elif isinstance(a,(tuple,list)):
        for i in range(min(4,len(a))):
            x=a[i]
            if isgoodnum(x):
                r[i]=x
    return r

def point(x=False,y=False,z=False,w=False):
    """Point creation from point or scalars"""
    if ispoint(x):
        return list(x)
    r = vect(x,y,z,w if isgoodnum(w) else 1.0)
    if r[3] > 0:
        return r
    raise ValueError('bad w argument to point()')

def vector(x=0.0,y=0.0,z=0.0):
    """direction vector in the w=0 hyperplane"""
    return [x,y,z,0.0]

def vset(result,x,y,z,w=1.0):
    """write ``x,y,z,w`` into ``result`` and return it, or return a new
    list if ``result`` is ``None``"""
    if result is None:
        return [x,y,z,w]
    result[0]=x
    result[1]=y
    result[2]=z
    result[3]=w
    return result

## predicates
## ----------

def isvect(x):
    """
    check to see if argument is a proper vector for our purposes
    """
    return isinstance(x,list) and len(x) == 4 and isgoodnum(x[0]) and isgoodnum(x[1]) and isgoodnum(x[2]) and isgoodnum(x[3])

def ispoint(x):
    """ is it a point?"""
    return isvect(x) and x[3] > 0.0

## R^3 -> R^3 functions: ignore w component
## ------------------------------------------------

def cross(a,b,result=None):
    """cross product `a x b` as a direction vector"""
    return vset(result,
                a[1]*b[2] - a[2]*b[1],
                a[2]*b[0] - a[0]*b[2],
                a[0]*b[1] - a[1]*b[0],
                0.0)

def crossxyz(result,ux,uy,uz,vx,vy,vz):
    """cross product of two vectors given as unpacked components"""
    return vset(result,
                uy*vz - uz*vy,
                uz*vx - ux*vz,
                ux*vy - uy*vx,
                0.0)

## R^3 -> R functions -- ignore w component
## ----------------------------------------

def dot(a,b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]

def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0]*a[0]+a[1]*a[1]+a[2]*a[2])

def normalize(a,result=None):
    """scale 3 vector ``a`` to unit length as a direction vector.
    Return ``None`` (leaving ``result`` untouched) if ``a`` is too
    short to normalize safely."""
    m = mag(a)
    if m <= epsilon2:
        return None
    return vset(result,a[0]/m,a[1]/m,a[2]/m,0.0)

## formatting
## ----------

def vstr(a):
    """pretty print vectors and lists of vectors, dropping the
    coordinates that carry no information"""
    if isvect(a):
        if a[3] == 0.0:
            return "<{}, {}, {}>".format(a[0],a[1],a[2])
        if abs(a[3]-1.0) > epsilon: # not in w=1
            return "[{}, {}, {}, {}]".format(a[0],a[1],a[2],a[3])
        elif abs(a[2]) > epsilon: # not in z=0
            return "[{}, {}, {}]".format(a[0],a[1],a[2])
        else: # in x-y plane
            return "[{}, {}]".format(a[0],a[1])
    if isinstance(a,list) and len(a) > 0 and all(isvect(x) for x in a):
        return "[" + ", ".join(vstr(x) for x in a) + "]"
    return str(a)
