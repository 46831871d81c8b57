"""
Typed containers for retained posterior draws.

Only post-burn-in draws ever enter these records: from_inference_data reads
the 'posterior' group of the trace and nothing else.
"""
import numpy as np
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from .data import StrengthData
from .models import RegressionModelSpec, NOISE

if TYPE_CHECKING:
    import arviz as az


@dataclass(frozen=True)
class ParameterSummary:
    """Normal approximation of one marginal posterior."""
    name: str
    mean: float
    std: float

    def sample(self, rng: np.random.Generator, size=None):
        return rng.normal(self.mean, self.std, size)


@dataclass(frozen=True)
class ParameterDraws:
    """Retained draws of a single parameter."""
    name: str
    values: np.ndarray

    def __post_init__(self):
        values = np.array(self.values, dtype=np.float64).ravel()
        values.setflags(write=False)
        object.__setattr__(self, 'values', values)

    def __len__(self) -> int:
        return len(self.values)

    def mean(self) -> float:
        return float(self.values.mean())

    def std(self) -> float:
        # Sample standard deviation
        return float(self.values.std(ddof=1)) if len(self.values) > 1 else 0.0

    def summary(self) -> ParameterSummary:
        return ParameterSummary(self.name, self.mean(), self.std())


@dataclass(frozen=True)
class PosteriorDraws:
    """Ordered set of per-parameter draws sharing the same draw index."""
    parameters: Tuple[ParameterDraws, ...]

    def __post_init__(self):
        params = tuple(self.parameters)
        if not params:
            raise ValueError("PosteriorDraws needs at least one parameter")
        lengths = {len(p) for p in params}
        if len(lengths) != 1:
            counts = {p.name: len(p) for p in params}
            raise ValueError(f"Parameter draw counts differ: {counts}")
        names = [p.name for p in params]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate parameter names: {names}")
        object.__setattr__(self, 'parameters', params)

    @classmethod
    def from_arrays(cls, arrays: Mapping[str, Sequence[float]]) -> 'PosteriorDraws':
        return cls(tuple(ParameterDraws(name, values) for name, values in arrays.items()))

    @classmethod
    def from_inference_data(cls, trace: 'az.InferenceData',
                            names: Iterable[str]) -> 'PosteriorDraws':
        """Flatten chains of the posterior group (warmup is never read)."""
        posterior = trace.posterior
        params = []
        for name in names:
            values = np.asarray(posterior[name].values)  # [chain, draw]
            params.append(ParameterDraws(name, values.reshape(-1)))
        return cls(tuple(params))

    def __len__(self) -> int:
        return len(self.parameters[0])

    def __getitem__(self, name: str) -> ParameterDraws:
        for p in self.parameters:
            if p.name == name:
                return p
        raise KeyError(name)

    def __contains__(self, name: str) -> bool:
        return any(p.name == name for p in self.parameters)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    def matrix(self, names: Optional[Sequence[str]] = None) -> np.ndarray:
        """[n_draws, n_params] array in the order of names."""
        names = self.names if names is None else names
        return np.column_stack([self[name].values for name in names])

    def means(self) -> Dict[str, float]:
        return {p.name: p.mean() for p in self.parameters}

    def summarize(self) -> Dict[str, ParameterSummary]:
        return {p.name: p.summary() for p in self.parameters}


def format_summary(summaries: Mapping[str, ParameterSummary], title: str = '') -> str:
    lines = []
    if title:
        lines.append(title)
    lines.append(f"  {'Parameter':<32} {'Mean':>12} {'Std':>12}")
    lines.append("  " + "-" * 58)
    for s in summaries.values():
        lines.append(f"  {s.name:<32} {s.mean:>12.4f} {s.std:>12.4f}")
    return '\n'.join(lines)


def posterior_predictive(draws: PosteriorDraws,
                         spec: RegressionModelSpec,
                         data: StrengthData,
                         rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """One synthetic response per covariate row.

    For each row a parameter vector is drawn uniformly from the retained
    draws, then a response from Normal(linear predictor, sigma).

    Returns:
        [n] array, n == len(data)
    """
    if rng is None:
        rng = np.random.default_rng()

    n = len(data)
    picks = rng.integers(0, len(draws), size=n)

    coefs = draws.matrix(spec.coefficient_names)[picks]   # [n, 1 + k]
    sigma = draws[NOISE].values[picks]                     # [n]
    X = spec.design_matrix(data)                           # [n, 1 + k]

    mu = np.einsum('ij,ij->i', coefs, X)
    return rng.normal(mu, sigma)
