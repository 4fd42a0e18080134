"""Vector and quaternion algebra over scalar expression trees.

Nothing here computes numbers: every operation composes :class:`Expr` nodes,
so the results evaluate and differentiate through the scalar machinery.
Inputs are deep-copied, so a vector can be used in several operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from .expr import Expr, ParamValues
from .types import ParamHandle

Scalar = Union[Expr, float]


def _c(e: Expr) -> Expr:
    return e.deep_copy()


def _scalar(s: Scalar) -> Expr:
    return _c(s) if isinstance(s, Expr) else Expr.from_value(s)


@dataclass
class ExprVector:
    x: Expr
    y: Expr
    z: Expr

    @classmethod
    def from_exprs(cls, x: Expr, y: Expr, z: Expr) -> "ExprVector":
        return cls(x, y, z)

    @classmethod
    def from_params(cls, x: ParamHandle, y: ParamHandle, z: ParamHandle) -> "ExprVector":
        return cls(Expr.from_param(x), Expr.from_param(y), Expr.from_param(z))

    @classmethod
    def from_values(cls, x: Union[float, Sequence[float], np.ndarray], y: float = 0.0, z: float = 0.0) -> "ExprVector":
        if isinstance(x, (np.ndarray, list, tuple)):
            x, y, z = (float(v) for v in x)
        return cls(Expr.from_value(x), Expr.from_value(y), Expr.from_value(z))

    def copy(self) -> "ExprVector":
        return ExprVector(_c(self.x), _c(self.y), _c(self.z))

    def plus(self, b: "ExprVector") -> "ExprVector":
        return ExprVector(_c(self.x).plus(_c(b.x)), _c(self.y).plus(_c(b.y)), _c(self.z).plus(_c(b.z)))

    def minus(self, b: "ExprVector") -> "ExprVector":
        return ExprVector(_c(self.x).minus(_c(b.x)), _c(self.y).minus(_c(b.y)), _c(self.z).minus(_c(b.z)))

    def negated(self) -> "ExprVector":
        return ExprVector(_c(self.x).negate(), _c(self.y).negate(), _c(self.z).negate())

    def dot(self, b: "ExprVector") -> Expr:
        r = _c(self.x).times(_c(b.x))
        r = r.plus(_c(self.y).times(_c(b.y)))
        r = r.plus(_c(self.z).times(_c(b.z)))
        return r

    def cross(self, b: "ExprVector") -> "ExprVector":
        return ExprVector(
            _c(self.y).times(_c(b.z)).minus(_c(self.z).times(_c(b.y))),
            _c(self.z).times(_c(b.x)).minus(_c(self.x).times(_c(b.z))),
            _c(self.x).times(_c(b.y)).minus(_c(self.y).times(_c(b.x))),
        )

    def scaled_by(self, s: Scalar) -> "ExprVector":
        return ExprVector(
            _c(self.x).times(_scalar(s)),
            _c(self.y).times(_scalar(s)),
            _c(self.z).times(_scalar(s)),
        )

    def magnitude(self) -> Expr:
        return self.dot(self).sqrt()

    def with_magnitude(self, s: Scalar) -> "ExprVector":
        return self.scaled_by(_scalar(s).div(self.magnitude()))

    def eval(self, params: Optional[ParamValues] = None) -> np.ndarray:
        return np.array([self.x.eval(params), self.y.eval(params), self.z.eval(params)], dtype=float)

    def __iter__(self):
        return iter((self.x, self.y, self.z))


@dataclass
class ExprQuaternion:
    w: Expr
    vx: Expr
    vy: Expr
    vz: Expr

    @classmethod
    def from_exprs(cls, w: Expr, vx: Expr, vy: Expr, vz: Expr) -> "ExprQuaternion":
        return cls(w, vx, vy, vz)

    @classmethod
    def from_params(cls, w: ParamHandle, vx: ParamHandle, vy: ParamHandle, vz: ParamHandle) -> "ExprQuaternion":
        return cls(Expr.from_param(w), Expr.from_param(vx), Expr.from_param(vy), Expr.from_param(vz))

    @classmethod
    def from_values(cls, w: Union[float, Sequence[float], np.ndarray], vx: float = 0.0, vy: float = 0.0, vz: float = 0.0) -> "ExprQuaternion":
        if isinstance(w, (np.ndarray, list, tuple)):
            w, vx, vy, vz = (float(v) for v in w)
        return cls(Expr.from_value(w), Expr.from_value(vx), Expr.from_value(vy), Expr.from_value(vz))

    def _sq(self, e: Expr) -> Expr:
        return _c(e).square()

    def _twice(self, a: Expr, b: Expr) -> Expr:
        return Expr.from_value(2).times(_c(a).times(_c(b)))

    def rotation_u(self) -> ExprVector:
        w, vx, vy, vz = self.w, self.vx, self.vy, self.vz
        x = self._sq(w).plus(self._sq(vx)).minus(self._sq(vy)).minus(self._sq(vz))
        y = self._twice(w, vz).plus(self._twice(vx, vy))
        z = self._twice(vx, vz).minus(self._twice(w, vy))
        return ExprVector(x, y, z)

    def rotation_v(self) -> ExprVector:
        w, vx, vy, vz = self.w, self.vx, self.vy, self.vz
        x = self._twice(vx, vy).minus(self._twice(w, vz))
        y = self._sq(w).minus(self._sq(vx)).plus(self._sq(vy)).minus(self._sq(vz))
        z = self._twice(w, vx).plus(self._twice(vy, vz))
        return ExprVector(x, y, z)

    def rotation_n(self) -> ExprVector:
        w, vx, vy, vz = self.w, self.vx, self.vy, self.vz
        x = self._twice(w, vy).plus(self._twice(vx, vz))
        y = self._twice(vy, vz).minus(self._twice(w, vx))
        z = self._sq(w).minus(self._sq(vx)).minus(self._sq(vy)).plus(self._sq(vz))
        return ExprVector(x, y, z)

    def rotate(self, p: ExprVector) -> ExprVector:
        """Express ``p`` in the basis (u, v, n) of this rotation."""

        u = self.rotation_u().scaled_by(p.x)
        v = self.rotation_v().scaled_by(p.y)
        n = self.rotation_n().scaled_by(p.z)
        return u.plus(v).plus(n)

    def times(self, b: "ExprQuaternion") -> "ExprQuaternion":
        sa, sb = self.w, b.w
        va = ExprVector(self.vx, self.vy, self.vz)
        vb = ExprVector(b.vx, b.vy, b.vz)
        w = _c(sa).times(_c(sb)).minus(va.dot(vb))
        vr = vb.scaled_by(sa).plus(va.scaled_by(sb).plus(va.cross(vb)))
        return ExprQuaternion(w, vr.x, vr.y, vr.z)

    def magnitude(self) -> Expr:
        r = self._sq(self.w).plus(self._sq(self.vx)).plus(self._sq(self.vy)).plus(self._sq(self.vz))
        return r.sqrt()

    def eval(self, params: Optional[ParamValues] = None) -> np.ndarray:
        return np.array([c.eval(params) for c in (self.w, self.vx, self.vy, self.vz)], dtype=float)


__all__ = ["ExprVector", "ExprQuaternion", "Scalar"]
