"""
Acceptance-rejection sampling of synthetic strength responses.

An alternative to the MCMC posterior predictive. Each trial:

  1. picks a covariate row uniformly from the data
  2. draws every parameter independently from its marginal posterior
     summary (posterior correlation between parameters is ignored)
  3. synthesises a candidate response from those parameters
  4. evaluates the candidate's density under the posterior-parameterised
     model (f) and under a prior-parameterised model (g)
  5. accepts the candidate if u < f / (k·g), u ~ Uniform(0, 1)

Trials whose densities or ratio are not finite are skipped, never raised.
The number of accepted samples is variable and at most n_trials.
"""
import warnings
import numpy as np
from dataclasses import dataclass
from scipy import stats
from tqdm import tqdm
from typing import Mapping, Optional

from .data import StrengthData
from .models import RegressionModelSpec, NOISE
from .posterior import ParameterSummary


RATIO_FORMS = ('standard', 'literal')


@dataclass
class RejectionConfig:
    """Configuration for the acceptance-rejection illustration."""
    n_trials: int = 1000
    k: float = 2.0                 # Envelope constant
    ratio: str = 'standard'        # 'standard': f/(k*g); 'literal': f/k*g
    seed: Optional[int] = 2024
    progressbar: bool = False
    min_acceptance_rate: float = 0.01  # Warn below this

    def __post_init__(self):
        if self.n_trials < 0:
            raise ValueError(f"n_trials must be non-negative, got {self.n_trials}")
        if not np.isfinite(self.k) or self.k <= 0:
            raise ValueError(f"Envelope constant k must be positive, got {self.k}")
        if self.ratio not in RATIO_FORMS:
            raise ValueError(f"Unknown ratio form '{self.ratio}' (use {RATIO_FORMS})")


@dataclass
class RejectionResult:
    accepted: np.ndarray
    n_trials: int
    n_skipped: int

    @property
    def n_accepted(self) -> int:
        return len(self.accepted)

    @property
    def acceptance_rate(self) -> float:
        return self.n_accepted / self.n_trials if self.n_trials else 0.0


def acceptance_ratio(f: float, g: float, k: float, form: str = 'standard') -> float:
    """Acceptance probability for a candidate with target f and proposal g."""
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        if form == 'literal':
            return np.float64(f) / k * g
        return np.float64(f) / (k * g)


def acceptance_rejection_sample(spec: RegressionModelSpec,
                                summaries: Mapping[str, ParameterSummary],
                                data: StrengthData,
                                config: Optional[RejectionConfig] = None,
                                verbose: bool = True) -> RejectionResult:
    """Draw synthetic strength responses by acceptance-rejection.

    Args:
        spec: Model whose priors parameterise the proposal density g
        summaries: Normal approximation of each marginal posterior
        data: Covariate rows to sample from
        config: Trial count, envelope constant, ratio form, seed

    Returns:
        RejectionResult with at most config.n_trials accepted responses
    """
    config = config or RejectionConfig()
    rng = np.random.default_rng(config.seed)

    missing = [p for p in spec.parameter_names if p not in summaries]
    if missing:
        raise ValueError(f"No posterior summary for {missing}")

    X = spec.design_matrix(data)
    coef_names = spec.coefficient_names
    accepted = []
    n_skipped = 0

    for _ in tqdm(range(config.n_trials), disable=not config.progressbar,
                  desc=f'Rejection [{spec.name}]'):
        x = X[rng.integers(0, len(data))]

        post = {name: summaries[name].sample(rng) for name in spec.parameter_names}
        prior = {name: spec.prior(name).sample(rng) for name in spec.parameter_names}

        sigma_post = post[NOISE]
        if not np.isfinite(sigma_post) or sigma_post <= 0:
            n_skipped += 1
            continue

        mu_post = float(x @ np.array([post[n] for n in coef_names]))
        mu_prior = float(x @ np.array([prior[n] for n in coef_names]))
        y = rng.normal(mu_post, sigma_post)

        with np.errstate(invalid='ignore'):
            f_y = stats.norm.pdf(y, loc=mu_post, scale=sigma_post)
            g_y = stats.norm.pdf(y, loc=mu_prior, scale=prior[NOISE])
        ratio = acceptance_ratio(f_y, g_y, config.k, config.ratio)

        if not (np.isfinite(f_y) and np.isfinite(g_y) and np.isfinite(ratio)):
            n_skipped += 1
            continue

        if rng.uniform() < ratio:
            accepted.append(y)

    result = RejectionResult(
        accepted=np.array(accepted, dtype=np.float64),
        n_trials=config.n_trials,
        n_skipped=n_skipped,
    )

    if verbose:
        print(f"[Rejection] {spec.name}: accepted {result.n_accepted}/{result.n_trials} "
              f"({result.acceptance_rate:.1%}), skipped {n_skipped} non-finite trials, "
              f"k={config.k}, ratio={config.ratio}")

    if config.n_trials and result.acceptance_rate < config.min_acceptance_rate:
        warnings.warn(f"Acceptance rate {result.acceptance_rate:.2%} for '{spec.name}' "
                      f"is below {config.min_acceptance_rate:.0%}; consider a smaller k")

    return result
