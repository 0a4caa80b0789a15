'''
Result containers for the RARMA Toolbox.

``EstimationResult`` records how a single optimization ended and ``ARMAFit``
bundles it with the fitted parameters, the model that was fitted and, for
iterative estimators, the parameters and result of the stage that seeded the
optimization. Both are immutable; a fit can be passed on as the starting point
of a later estimator stage.
'''

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import numpy as np
import pandas as pd

from rarma.core.parameters import ARMAParameters

if TYPE_CHECKING:
    from rarma.models.time_series.arma import ARMAModel


class EstimationMethod(Enum):
    """Estimators implemented by the toolbox, valued by their display names.

    ``BMM`` tags fits of the BMM stage, which the BIP-MM pipeline may select.
    """
    HANNAN_RISSANEN = "Hannan-Rissanen"
    OLS = "OLS"
    MLE = "MLE"
    FTAU = "FTAU"
    S = "S"
    BS = "BS"
    MM = "MM"
    BMM = "BMM"

    def __str__(self) -> str:
        return self.value


def _format_number(value: float, width: int = 8, left: bool = False) -> str:
    """Fixed four-decimal formatting used by all summaries."""
    if left:
        return f"{value:<{width}.4f}"
    return f"{value:>{width}.4f}"


@dataclass(frozen=True)
class EstimationResult:
    """Outcome of one estimation.

    Attributes:
        method: Estimator that produced the result
        convergence: True only if the optimizer reported full convergence
        final_cost: Objective value at the returned parameters
        report: Optional free-text optimizer report
    """

    method: EstimationMethod
    convergence: bool
    final_cost: float
    report: Optional[str] = None

    def summary(self) -> str:
        """Render the result as a small fixed-width table."""
        lines = [
            f"{'estimation method':<20}{str(self.method):<18} ",
            f"{'convergence':<20}{'TRUE' if self.convergence else 'FALSE':<18} ",
            f"{'final cost':<20}{_format_number(self.final_cost, 18, left=True)}",
        ]
        return "\n".join(lines) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a JSON-friendly dictionary."""
        return {
            "method": self.method.value,
            "convergence": bool(self.convergence),
            "final_cost": float(self.final_cost),
            "report": self.report,
        }

    def __str__(self) -> str:
        return self.summary()


@dataclass(frozen=True)
class ARMAFit:
    """Fitted ARMA model.

    The fit keeps a reference to the model it was estimated on; the model is
    not copied.

    Attributes:
        model: The fitted ``ARMAModel``
        params: Final parameter estimates
        result: Outcome of the final optimization
        initial_params: Parameters that seeded the optimization (None for
            closed-form estimators)
        initial_result: Result of the seeding stage (None for closed-form
            estimators)
    """

    model: 'ARMAModel'
    params: ARMAParameters
    result: EstimationResult
    initial_params: Optional[ARMAParameters] = None
    initial_result: Optional[EstimationResult] = None

    @property
    def method(self) -> EstimationMethod:
        """Estimator that produced the fit."""
        return self.result.method

    @property
    def convergence(self) -> bool:
        """Whether the final optimization fully converged."""
        return self.result.convergence

    @property
    def final_cost(self) -> float:
        """Objective value at the fitted parameters."""
        return self.result.final_cost

    @staticmethod
    def _parameter_lines(params: ARMAParameters) -> List[str]:
        phi = "".join(_format_number(v) + " " for v in params.phi)
        theta = "".join(_format_number(v) + " " for v in params.theta)
        return [
            f"{'phi':<8}{phi}",
            f"{'theta':<8}{theta}",
            f"{'mu':<8}{_format_number(params.mu)}",
        ]

    def summary(self) -> str:
        """Render initial values, the result block and the estimates."""
        parts = ["ARMA estimation summary\n"]

        if self.initial_params is not None:
            parts.append("Initial values\n")
            parts.append("\n".join(self._parameter_lines(self.initial_params)) + "\n")
            if self.initial_result is not None:
                parts.append(self.initial_result.summary())

        parts.append(self.result.summary())
        parts.append("Estimated parameters\n")
        parts.append("\n".join(self._parameter_lines(self.params)))

        return "\n".join(parts) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        """Convert the fit to a JSON-friendly dictionary."""
        return {
            "p": self.model.p,
            "q": self.model.q,
            "n": self.model.n,
            "params": self.params.to_dict(),
            "result": self.result.to_dict(),
            "initial_params": (self.initial_params.to_dict()
                               if self.initial_params is not None else None),
            "initial_result": (self.initial_result.to_dict()
                               if self.initial_result is not None else None),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Tabulate the initial and final estimates by parameter name."""
        data = {"Estimate": pd.Series(self.params.to_dict(), dtype=np.float64)}
        if self.initial_params is not None:
            data["Initial"] = pd.Series(self.initial_params.to_dict(), dtype=np.float64)
        frame = pd.DataFrame(data)
        frame.index.name = "Parameter"
        return frame

    def __str__(self) -> str:
        return self.summary()
