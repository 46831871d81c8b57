"""
Plastic Strength — Regression Model Definitions
================================================
Structured descriptions of the two competing regression models, plus the
ordinary least-squares fit used to centre their priors.

    Model A (multiple regression):  strength ~ temperature + pressure
    Model B (ratio regression):     strength ~ pressure / temperature

Each model is a RegressionModelSpec: the regressors it uses and one Normal
prior per parameter (intercept, one slope per regressor, noise scale).
The likelihood is the same for every model:

    strength_i ~ Normal(intercept + Σ_j beta_j · x_ij, sigma)

Prior means come from the least-squares fit; prior precisions are fixed,
hand-chosen literals.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, Tuple

from .data import StrengthData


# ═══════════════════════════════════════════════════════════════
# Regressors
# ═══════════════════════════════════════════════════════════════

REGRESSORS: Dict[str, Callable[[StrengthData], np.ndarray]] = {
    'temperature': lambda d: d.temperature,
    'pressure': lambda d: d.pressure,
    'pressure_per_temperature': lambda d: d.pressure / d.temperature,
}

INTERCEPT = 'intercept'
NOISE = 'sigma'


def coefficient_name(regressor: str) -> str:
    return f'beta_{regressor}'


def regressor_column(data: StrengthData, regressor: str) -> np.ndarray:
    if regressor not in REGRESSORS:
        raise ValueError(f"Unknown regressor '{regressor}' "
                         f"(known: {sorted(REGRESSORS)})")
    return np.asarray(REGRESSORS[regressor](data), dtype=np.float64)


def design_matrix(data: StrengthData, regressors: Tuple[str, ...]) -> np.ndarray:
    """[n, 1 + k] matrix: intercept column followed by the regressors."""
    columns = [np.ones(len(data))]
    columns.extend(regressor_column(data, r) for r in regressors)
    return np.column_stack(columns)


# ═══════════════════════════════════════════════════════════════
# Priors
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PriorSpec:
    """Normal prior for a single parameter, parameterised by precision."""
    name: str
    mu: float
    tau: float  # Precision = 1 / variance
    bounds: Optional[Tuple[Optional[float], Optional[float]]] = None  # Truncation

    def __post_init__(self):
        if not np.isfinite(self.mu):
            raise ValueError(f"Prior '{self.name}': mean must be finite, got {self.mu}")
        if not np.isfinite(self.tau) or self.tau <= 0:
            raise ValueError(f"Prior '{self.name}': precision must be positive, got {self.tau}")

    @property
    def sigma(self) -> float:
        return float(1.0 / np.sqrt(self.tau))

    def sample(self, rng: np.random.Generator, size=None):
        """Draw from the untruncated Normal."""
        return rng.normal(self.mu, self.sigma, size)


# Hand-chosen precisions (1/variance) for each parameter role
DEFAULT_PRECISIONS = {
    INTERCEPT: 0.01,
    'slope': 1.0,
    NOISE: 1.0,
}


# ═══════════════════════════════════════════════════════════════
# Least-squares seed fit
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LeastSquaresFit:
    """Point estimates from ordinary least squares."""
    regressors: Tuple[str, ...]
    coefficients: Dict[str, float]
    residual_std: float
    r_squared: float
    n_obs: int

    def coefficient_vector(self) -> np.ndarray:
        names = [INTERCEPT] + [coefficient_name(r) for r in self.regressors]
        return np.array([self.coefficients[n] for n in names])


def least_squares_fit(data: StrengthData, regressors: Tuple[str, ...]) -> LeastSquaresFit:
    """Fit strength on an intercept plus the given regressors by OLS."""
    regressors = tuple(regressors)
    X = design_matrix(data, regressors)
    y = data.strength
    n, p = X.shape
    if n <= p:
        raise ValueError(f"Need more observations than parameters ({n} <= {p})")

    beta, _, rank, _ = np.linalg.lstsq(X, y, rcond=None)
    if rank < p:
        raise ValueError(f"Design matrix is rank deficient (rank {rank} < {p})")

    residuals = y - X @ beta
    ss_res = float(residuals @ residuals)
    ss_tot = float(((y - y.mean()) ** 2).sum())

    names = [INTERCEPT] + [coefficient_name(r) for r in regressors]
    return LeastSquaresFit(
        regressors=regressors,
        coefficients={name: float(b) for name, b in zip(names, beta)},
        residual_std=float(np.sqrt(ss_res / (n - p))),
        r_squared=1.0 - ss_res / ss_tot if ss_tot > 0 else 1.0,
        n_obs=n,
    )


# ═══════════════════════════════════════════════════════════════
# Model specification
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RegressionModelSpec:
    """Declarative Bayesian linear regression: priors + likelihood relation."""
    name: str
    regressors: Tuple[str, ...]
    priors: Mapping[str, PriorSpec] = field(default_factory=dict)

    def __post_init__(self):
        for r in self.regressors:
            if r not in REGRESSORS:
                raise ValueError(f"Unknown regressor '{r}' in model '{self.name}'")
        missing = [p for p in self.parameter_names if p not in self.priors]
        if missing:
            raise ValueError(f"Model '{self.name}' has no prior for {missing}")

    @property
    def coefficient_names(self) -> Tuple[str, ...]:
        return (INTERCEPT,) + tuple(coefficient_name(r) for r in self.regressors)

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return self.coefficient_names + (NOISE,)

    @property
    def formula(self) -> str:
        rhs = ' + '.join(self.regressors).replace('pressure_per_temperature',
                                                  'pressure/temperature')
        return f'strength ~ {rhs}'

    def prior(self, name: str) -> PriorSpec:
        return self.priors[name]

    def prior_means(self) -> Dict[str, float]:
        return {name: self.priors[name].mu for name in self.parameter_names}

    def design_matrix(self, data: StrengthData) -> np.ndarray:
        return design_matrix(data, self.regressors)

    def linear_predictor(self, data: StrengthData, coefficients: np.ndarray) -> np.ndarray:
        """Mean response for each row.

        Args:
            coefficients: [1 + k] vector, or [m, 1 + k] stack of draws

        Returns:
            [n] vector, or [m, n] matrix for a stack of draws
        """
        coefficients = np.asarray(coefficients, dtype=np.float64)
        X = self.design_matrix(data)
        return coefficients @ X.T


def build_model_spec(name: str,
                     fit: LeastSquaresFit,
                     precisions: Optional[Dict[str, float]] = None) -> RegressionModelSpec:
    """Centre Normal priors on the least-squares estimates.

    Args:
        name: Model name used in reports
        fit: Least-squares fit supplying the prior means
        precisions: Per-parameter precision overrides (by parameter name)
    """
    precisions = dict(precisions or {})
    priors = {}

    for coef, value in fit.coefficients.items():
        role = INTERCEPT if coef == INTERCEPT else 'slope'
        tau = precisions.get(coef, DEFAULT_PRECISIONS[role])
        priors[coef] = PriorSpec(name=coef, mu=value, tau=tau)

    priors[NOISE] = PriorSpec(
        name=NOISE,
        mu=fit.residual_std,
        tau=precisions.get(NOISE, DEFAULT_PRECISIONS[NOISE]),
        bounds=(0.0, None),
    )

    return RegressionModelSpec(name=name, regressors=fit.regressors, priors=priors)


MULTIPLE_REGRESSORS = ('temperature', 'pressure')
RATIO_REGRESSORS = ('pressure_per_temperature',)


def multiple_regression_spec(fit: LeastSquaresFit,
                             precisions: Optional[Dict[str, float]] = None) -> RegressionModelSpec:
    """Model A: strength ~ temperature + pressure."""
    if fit.regressors != MULTIPLE_REGRESSORS:
        raise ValueError(f"Expected a fit on {MULTIPLE_REGRESSORS}, got {fit.regressors}")
    return build_model_spec('multiple', fit, precisions)


def ratio_regression_spec(fit: LeastSquaresFit,
                          precisions: Optional[Dict[str, float]] = None) -> RegressionModelSpec:
    """Model B: strength ~ pressure / temperature."""
    if fit.regressors != RATIO_REGRESSORS:
        raise ValueError(f"Expected a fit on {RATIO_REGRESSORS}, got {fit.regressors}")
    return build_model_spec('ratio', fit, precisions)
