'''
Parameter container for ARMA(p,q) models.

The optimizer works on a flat vector ``[phi_1..phi_p, theta_1..theta_q, mu]``;
``ARMAParameters`` is the structured view of that vector. Unpacking always
copies, so the AR and MA blocks never alias the optimizer buffer or each
other, and zero-length blocks are independent empty arrays.
'''

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Union

import numpy as np

from rarma.core.exceptions import raise_parameter_error
from rarma.core.types import ParameterVector, Vector
from rarma.core.validation import validate_coefficients


@dataclass
class ARMAParameters:
    """Parameters of an ARMA(p,q) model.

    Attributes:
        phi: Autoregressive coefficients (length p, may be empty)
        theta: Moving average coefficients (length q, may be empty)
        mu: Location of the process
    """

    phi: Vector
    theta: Vector
    mu: float = 0.0

    def __post_init__(self) -> None:
        """Normalize the coefficient blocks to independent float64 arrays."""
        self.phi = validate_coefficients(self.phi, name="phi")
        self.theta = validate_coefficients(self.theta, name="theta")
        self.mu = float(self.mu)
        if not np.isfinite(self.mu):
            raise_parameter_error(
                "mu must be finite",
                param_name="mu",
                param_value=self.mu,
                constraint="finite value"
            )

    @property
    def p(self) -> int:
        """Autoregressive order."""
        return self.phi.shape[0]

    @property
    def q(self) -> int:
        """Moving average order."""
        return self.theta.shape[0]

    @property
    def size(self) -> int:
        """Length of the flat parameter vector."""
        return self.p + self.q + 1

    def to_array(self) -> ParameterVector:
        """Pack the parameters into a flat ``[phi, theta, mu]`` vector."""
        return np.concatenate([self.phi, self.theta, [self.mu]])

    @classmethod
    def from_array(cls, array: Union[ParameterVector, Sequence[float]],
                   p: int, q: int) -> 'ARMAParameters':
        """Unpack a flat ``[phi, theta, mu]`` vector.

        Args:
            array: Flat parameter vector of length ``p + q + 1``
            p: Autoregressive order
            q: Moving average order

        Returns:
            ARMAParameters: Parameter object with copied blocks

        Raises:
            ParameterError: If the vector length does not match the orders
        """
        array = np.asarray(array, dtype=np.float64).ravel()
        expected_length = p + q + 1
        if array.shape[0] != expected_length:
            raise_parameter_error(
                f"Parameter vector has length {array.shape[0]}, expected {expected_length}",
                param_name="params",
                constraint=f"length p + q + 1 = {expected_length}"
            )

        return cls(
            phi=array[:p].copy(),
            theta=array[p:p + q].copy(),
            mu=float(array[p + q])
        )

    def copy(self) -> 'ARMAParameters':
        """Return a deep copy."""
        return ARMAParameters(self.phi.copy(), self.theta.copy(), self.mu)

    def to_dict(self) -> Dict[str, Any]:
        """Return the parameters keyed by conventional names (phi1, theta1, mu)."""
        result: Dict[str, Any] = {}
        for i, value in enumerate(self.phi, start=1):
            result[f"phi{i}"] = float(value)
        for i, value in enumerate(self.theta, start=1):
            result[f"theta{i}"] = float(value)
        result["mu"] = self.mu
        return result

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ARMAParameters):
            return NotImplemented
        return (np.array_equal(self.phi, other.phi)
                and np.array_equal(self.theta, other.theta)
                and self.mu == other.mu)
