"""
Model comparison: mean squared error and the Deviance Information Criterion.

DIC (Spiegelhalter et al. 2002):

    D(θ)  = -2 Σ_i log p(y_i | θ)
    D̄     = mean of D over the retained draws
    D̂     = D evaluated at the posterior means
    pD    = D̄ - D̂            (effective number of parameters)
    DIC   = D̄ + pD

pV = var(D) / 2 is reported alongside as an alternative complexity
estimate. Lower DIC is preferred.
"""
import numpy as np
from dataclasses import dataclass, field
from scipy import stats
from typing import Dict, Mapping, Optional, Sequence, Tuple

from .data import StrengthData
from .models import RegressionModelSpec, NOISE
from .posterior import PosteriorDraws


def mean_squared_error(observed: Sequence[float], predicted: Sequence[float]) -> float:
    """Mean of squared paired differences."""
    observed = np.asarray(observed, dtype=np.float64)
    predicted = np.asarray(predicted, dtype=np.float64)
    if observed.shape != predicted.shape:
        raise ValueError(f"Length mismatch: {observed.shape} vs {predicted.shape}")
    if observed.size == 0:
        raise ValueError("MSE of empty sequences is undefined")
    return float(np.mean((observed - predicted) ** 2))


@dataclass(frozen=True)
class DICResult:
    mean_deviance: float   # D̄
    deviance_at_mean: float  # D̂
    p_d: float
    p_v: float
    dic: float

    def report(self, model_name: str = '') -> str:
        head = f"DIC [{model_name}]" if model_name else "DIC"
        return (f"{head}\n"
                f"  Mean deviance:  {self.mean_deviance:.2f}\n"
                f"  penalty (pD):   {self.p_d:.2f}\n"
                f"  penalty (pV):   {self.p_v:.2f}\n"
                f"  Penalized deviance: {self.dic:.2f}")


def _deviance(spec: RegressionModelSpec, data: StrengthData,
              coefficients: np.ndarray, sigma: np.ndarray) -> np.ndarray:
    """-2 log-likelihood for each coefficient/sigma row."""
    mu = np.atleast_2d(spec.linear_predictor(data, coefficients))  # [m, n]
    sigma = np.atleast_1d(sigma)[:, None]
    loglik = stats.norm.logpdf(data.strength[None, :], loc=mu, scale=sigma)
    return -2.0 * loglik.sum(axis=1)


def deviance_information_criterion(draws: PosteriorDraws,
                                   spec: RegressionModelSpec,
                                   data: StrengthData) -> DICResult:
    """DIC from every retained draw of the chain(s)."""
    coefs = draws.matrix(spec.coefficient_names)
    sigma = draws[NOISE].values

    deviance = _deviance(spec, data, coefs, sigma)
    mean_deviance = float(deviance.mean())
    deviance_at_mean = float(_deviance(spec, data, coefs.mean(axis=0), sigma.mean())[0])
    p_d = mean_deviance - deviance_at_mean
    p_v = float(deviance.var(ddof=1) / 2.0) if len(deviance) > 1 else 0.0

    return DICResult(
        mean_deviance=mean_deviance,
        deviance_at_mean=deviance_at_mean,
        p_d=p_d,
        p_v=p_v,
        dic=mean_deviance + p_d,
    )


@dataclass
class ModelComparison:
    """MSE and DIC side by side for competing models."""
    mse: Dict[str, float] = field(default_factory=dict)
    dic: Dict[str, DICResult] = field(default_factory=dict)

    @property
    def preferred(self) -> str:
        """Model with the lowest DIC."""
        if not self.dic:
            raise ValueError("No models to compare")
        return min(self.dic, key=lambda name: self.dic[name].dic)

    def report(self) -> str:
        lines = []
        for name, result in self.dic.items():
            lines.append(result.report(name))
            if name in self.mse:
                lines.append(f"  MSE (posterior predictive): {self.mse[name]:.4f}")
            lines.append("")
        lines.append(f"Preferred model (lowest DIC): {self.preferred}")
        return '\n'.join(lines)


def compare_models(models: Mapping[str, Tuple[PosteriorDraws, RegressionModelSpec]],
                   data: StrengthData,
                   predictions: Optional[Mapping[str, np.ndarray]] = None,
                   verbose: bool = True) -> ModelComparison:
    """Score each fitted model on the same observations.

    Args:
        models: {name: (retained draws, model spec)}
        data: Observations the models were fitted to
        predictions: {name: predicted strength}; MSE is skipped for models
            without one
    """
    comparison = ModelComparison()
    predictions = predictions or {}

    for name, (draws, spec) in models.items():
        comparison.dic[name] = deviance_information_criterion(draws, spec, data)
        if name in predictions:
            comparison.mse[name] = mean_squared_error(data.strength, predictions[name])

    if verbose:
        print("[Compare] Model comparison")
        print(comparison.report())

    return comparison
