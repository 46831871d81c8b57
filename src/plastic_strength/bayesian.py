"""
Plastic Strength — Bayesian Regression via MCMC
================================================
Fits a RegressionModelSpec to observed strength data with PyMC and returns
posterior draws for every parameter.

Mathematical Framework:
    Bayes' Theorem: P(θ|D) ∝ P(D|θ) × P(θ)

    P(θ) = independent Normal priors, one per parameter (precision form)
    P(D|θ) = Π_i Normal(strength_i | intercept + Σ_j beta_j · x_ij, sigma)

    MCMC (Markov Chain Monte Carlo) samples from P(θ|D). The first n_tune
    iterations of every chain are a burn-in / adaptation phase and are
    discarded; only the following n_draws iterations are retained.

Usage:
    from plastic_strength.models import least_squares_fit, ratio_regression_spec
    from plastic_strength.bayesian import BayesianRegression, BayesianConfig

    fit = least_squares_fit(data, ('pressure_per_temperature',))
    bayes = BayesianRegression(ratio_regression_spec(fit),
                               BayesianConfig(n_chains=2, n_draws=2000))
    trace = bayes.fit(data)

    draws = bayes.posterior_draws()
    print(draws.summarize())
    print(bayes.dic().report())

License: MIT
"""

import warnings
import numpy as np
from dataclasses import dataclass
from typing import Dict, Optional

import pymc as pm
import arviz as az

try:
    import matplotlib.pyplot as plt
    PLOTTING_AVAILABLE = True
except ImportError:
    PLOTTING_AVAILABLE = False

from .data import StrengthData
from .models import RegressionModelSpec, NOISE, INTERCEPT, coefficient_name, regressor_column
from .posterior import PosteriorDraws, posterior_predictive
from .comparison import DICResult, deviance_information_criterion


# ═══════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════

SAMPLERS = ('Metropolis', 'NUTS', 'Slice')


@dataclass
class BayesianConfig:
    """Configuration for Bayesian MCMC inference."""
    n_chains: int = 3              # Number of MCMC chains
    n_draws: int = 5000            # Samples per chain (post-burn-in)
    n_tune: int = 1000             # Burn-in / adaptation steps (discarded)
    target_accept: float = 0.9     # Target acceptance rate (NUTS only)
    sampler: str = 'Metropolis'    # Sampler: 'Metropolis', 'NUTS', 'Slice'

    # Computational
    cores: int = 1                 # Chains run sequentially
    progressbar: bool = False
    random_seed: Optional[int] = 42

    # Diagnostics
    check_convergence: bool = True  # Check R-hat and ESS
    rhat_threshold: float = 1.01    # R-hat convergence threshold
    verbose: bool = True

    def __post_init__(self):
        if self.sampler not in SAMPLERS:
            raise ValueError(f"Unknown sampler '{self.sampler}' (use {SAMPLERS})")
        if self.n_chains < 1 or self.n_draws < 1 or self.n_tune < 0:
            raise ValueError(f"Invalid chain settings: chains={self.n_chains}, "
                             f"draws={self.n_draws}, tune={self.n_tune}")


# ═══════════════════════════════════════════════════════════════
# Bayesian Regression — Main Class
# ═══════════════════════════════════════════════════════════════

class BayesianRegression:
    """Bayesian linear regression of plastic strength, sampled with PyMC.

    The model is built from a RegressionModelSpec: each prior becomes a
    pm.Normal (pm.TruncatedNormal when bounded) with the prior's mean and
    precision, and the likelihood is a Normal on observed strength.
    Chains start at the prior means.
    """

    def __init__(self,
                 spec: RegressionModelSpec,
                 config: Optional[BayesianConfig] = None):
        """
        Args:
            spec: Model definition (regressors + priors)
            config: MCMC configuration
        """
        self.spec = spec
        self.config = config or BayesianConfig()

        # Populated by fit()
        self.model = None
        self.trace = None
        self.data = None

        if self.config.verbose:
            print(f"[Bayesian] Model '{spec.name}': {spec.formula}")
            print(f"[Bayesian] Sampler: {self.config.sampler}, Chains: {self.config.n_chains}")

    def build_model(self, data: StrengthData) -> pm.Model:
        """Build the PyMC model with priors and likelihood.

        Every parameter's initial value is its prior mean.
        """
        with pm.Model() as model:
            params = {}
            for name in self.spec.parameter_names:
                prior = self.spec.prior(name)
                if prior.bounds:
                    lower, upper = prior.bounds
                    params[name] = pm.TruncatedNormal(
                        name, mu=prior.mu, tau=prior.tau, lower=lower, upper=upper,
                        initval=prior.mu,
                    )
                else:
                    params[name] = pm.Normal(name, mu=prior.mu, tau=prior.tau,
                                             initval=prior.mu)

            mu = params[INTERCEPT]
            for regressor in self.spec.regressors:
                x = pm.Data(f'x_{regressor}', regressor_column(data, regressor))
                mu = mu + params[coefficient_name(regressor)] * x

            pm.Normal('strength', mu=mu, sigma=params[NOISE], observed=data.strength)

        return model

    def _make_step(self):
        # Must be called inside the model context
        if self.config.sampler == 'NUTS':
            return pm.NUTS(target_accept=self.config.target_accept)
        if self.config.sampler == 'Slice':
            return pm.Slice()
        return pm.Metropolis()

    def fit(self, data: StrengthData) -> az.InferenceData:
        """Sample the posterior for the given observations.

        Returns:
            arviz.InferenceData holding only post-burn-in draws, with the
            pointwise log-likelihood
        """
        cfg = self.config
        self.data = data
        self.model = self.build_model(data)

        with self.model:
            if cfg.verbose:
                print(f"[Bayesian] Starting MCMC sampling for '{self.spec.name}'...")
                print(f"  Observations: {len(data)}")
                print(f"  Chains: {cfg.n_chains}")
                print(f"  Draws per chain: {cfg.n_draws}")
                print(f"  Burn-in steps: {cfg.n_tune}")

            self.trace = pm.sample(
                draws=cfg.n_draws,
                tune=cfg.n_tune,
                chains=cfg.n_chains,
                cores=cfg.cores,
                step=self._make_step(),
                discard_tuned_samples=True,
                progressbar=cfg.progressbar,
                random_seed=cfg.random_seed,
                compute_convergence_checks=False,
                return_inferencedata=True,
                idata_kwargs={'log_likelihood': True},
            )

        if cfg.check_convergence and cfg.n_chains > 1:
            self._check_convergence(self.trace)

        if cfg.verbose:
            print("[Bayesian] Sampling complete!")
        return self.trace

    def _require_trace(self, trace: Optional[az.InferenceData] = None) -> az.InferenceData:
        trace = trace if trace is not None else self.trace
        if trace is None:
            raise ValueError("No trace available. Run fit() first.")
        return trace

    def _check_convergence(self, trace: az.InferenceData) -> Dict[str, float]:
        """Check MCMC convergence using R-hat and effective sample size."""
        names = list(self.spec.parameter_names)
        rhat = az.rhat(trace, var_names=names)
        ess = az.ess(trace, var_names=names)
        total_samples = self.config.n_chains * self.config.n_draws

        if self.config.verbose:
            print("\n[Bayesian] Convergence Diagnostics:")
            print(f"  {'Parameter':<32} {'R-hat':>8} {'ESS':>10}")

        rhat_values = {}
        for var in names:
            rhat_val = float(rhat[var].values)
            ess_val = float(ess[var].values)
            rhat_values[var] = rhat_val
            if self.config.verbose:
                status = "ok" if rhat_val < self.config.rhat_threshold else "WARNING"
                print(f"  {var:<32} {rhat_val:>8.4f} {ess_val:>10.0f} "
                      f"({ess_val / total_samples:.1%}) {status}")
            if not rhat_val < self.config.rhat_threshold:
                warnings.warn(f"R-hat for '{var}' in model '{self.spec.name}' is "
                              f"{rhat_val:.3f} (threshold {self.config.rhat_threshold})")

        return rhat_values

    def posterior_draws(self, trace: Optional[az.InferenceData] = None) -> PosteriorDraws:
        """Retained draws of every model parameter, chains stacked."""
        trace = self._require_trace(trace)
        return PosteriorDraws.from_inference_data(trace, self.spec.parameter_names)

    def summarize_posterior(self,
                            trace: Optional[az.InferenceData] = None,
                            credible_interval: float = 0.95) -> Dict:
        """Summary statistics per parameter from ArviZ.

        Returns:
            Dict with mean, std, HDI bounds, R-hat and ESS for each parameter
        """
        trace = self._require_trace(trace)
        az_summary = az.summary(trace, var_names=list(self.spec.parameter_names),
                                hdi_prob=credible_interval)
        hdi_cols = [c for c in az_summary.columns if c.startswith('hdi_')]

        summary = {}
        for var_name in az_summary.index:
            row = az_summary.loc[var_name]
            summary[var_name] = {
                'mean': float(row['mean']),
                'std': float(row['sd']),
                'ci_lower': float(row[hdi_cols[0]]),
                'ci_upper': float(row[hdi_cols[1]]),
                'rhat': float(row['r_hat']) if 'r_hat' in az_summary.columns else None,
                'ess': float(row['ess_bulk']) if 'ess_bulk' in az_summary.columns else None,
            }
        return summary

    def dic(self, data: Optional[StrengthData] = None) -> DICResult:
        """Deviance Information Criterion over the full retained chain."""
        data = data if data is not None else self.data
        if data is None:
            raise ValueError("No data available. Run fit() first.")
        return deviance_information_criterion(self.posterior_draws(), self.spec, data)

    def waic(self, trace: Optional[az.InferenceData] = None):
        """Widely applicable information criterion (ArviZ)."""
        return az.waic(self._require_trace(trace))

    def posterior_predictive(self, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """One synthetic response per fitted observation."""
        if self.data is None:
            raise ValueError("No data available. Run fit() first.")
        return posterior_predictive(self.posterior_draws(), self.spec, self.data, rng)

    def plot_posterior(self,
                       trace: Optional[az.InferenceData] = None,
                       save_path: Optional[str] = None):
        """Trace plots and posterior densities for every parameter."""
        if not PLOTTING_AVAILABLE:
            print("[Warning] Matplotlib not available for plotting")
            return

        trace = self._require_trace(trace)
        names = list(self.spec.parameter_names)

        az.plot_trace(trace, var_names=names, compact=True, figsize=(12, 8))
        plt.tight_layout()
        if save_path:
            plt.savefig(f"{save_path}_trace.png", dpi=150, bbox_inches='tight')
        plt.show()

        az.plot_posterior(trace, var_names=names, hdi_prob=0.95)
        plt.tight_layout()
        if save_path:
            plt.savefig(f"{save_path}_posterior.png", dpi=150, bbox_inches='tight')
        plt.show()

    def save_trace(self, filepath: str):
        """Save MCMC trace to a NetCDF file."""
        trace = self._require_trace()
        az.to_netcdf(trace, filepath)
        print(f"[Bayesian] Trace saved to {filepath}")

    @staticmethod
    def load_trace(filepath: str) -> az.InferenceData:
        """Load a saved MCMC trace."""
        trace = az.from_netcdf(filepath)
        print(f"[Bayesian] Trace loaded from {filepath}")
        return trace
