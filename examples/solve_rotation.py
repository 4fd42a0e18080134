"""Example pipeline: find the unit quaternion that turns one direction into another.

The expression engine builds the residuals and their exact Jacobian;
scipy's least_squares drives the iteration.
"""

import numpy as np
from scipy.optimize import least_squares

from constraint_algebra import (
    Equation,
    ExprQuaternion,
    ExprVector,
    ParamList,
    SymbolicJacobian,
    quaternion_normalization,
)

W, VX, VY, VZ = 1, 2, 3, 4


def main() -> None:
    params = ParamList([(W, 1.0), (VX, 0.1), (VY, 0.1), (VZ, 0.1)])
    q = ExprQuaternion.from_params(W, VX, VY, VZ)

    source = ExprVector.from_values(1.0, 0.0, 0.0)
    target = ExprVector.from_values(0.0, 0.6, 0.8)
    rotated = q.rotate(source).minus(target)

    equations = [
        Equation(1, rotated.x),
        Equation(2, rotated.y),
        Equation(3, rotated.z),
        quaternion_normalization(4, q),
    ]
    jacobian = SymbolicJacobian(equations, [W, VX, VY, VZ], params)

    def residuals(x: np.ndarray) -> np.ndarray:
        jacobian.set_values(x)
        return jacobian.residuals()

    def jac(x: np.ndarray) -> np.ndarray:
        jacobian.set_values(x)
        return jacobian.evaluate()

    result = least_squares(residuals, jacobian.current_values(), jac=jac, method="lm")
    jacobian.set_values(result.x)
    print("Success:", result.success)
    print("Quaternion:", np.round(result.x, 6))
    print("Max residual:", float(np.max(np.abs(jacobian.residuals()))))
    print("Rotated source:", np.round(q.rotate(source).eval(params), 6))


if __name__ == "__main__":
    main()
