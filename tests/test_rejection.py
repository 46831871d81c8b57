"""
Unit tests for the acceptance-rejection sampler
"""

import warnings

import pytest
import numpy as np

from plastic_strength.models import least_squares_fit, ratio_regression_spec, RATIO_REGRESSORS
from plastic_strength.posterior import ParameterSummary
from plastic_strength.rejection import (
    RejectionConfig, RejectionResult, acceptance_rejection_sample, acceptance_ratio,
)


@pytest.fixture
def ratio_spec(sample):
    return ratio_regression_spec(least_squares_fit(sample, RATIO_REGRESSORS))


@pytest.fixture
def summaries(ratio_spec):
    """Posterior summaries equal to the priors, slightly tightened."""
    return {
        name: ParameterSummary(name, ratio_spec.prior(name).mu,
                               0.1 * ratio_spec.prior(name).sigma)
        for name in ratio_spec.parameter_names
    }


class TestRejectionConfig:

    def test_defaults(self):
        cfg = RejectionConfig()
        assert cfg.ratio == 'standard'
        assert cfg.k > 0

    @pytest.mark.parametrize("kwargs", [
        {'k': 0.0}, {'k': -2.0}, {'ratio': 'inverse'}, {'n_trials': -1},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            RejectionConfig(**kwargs)


class TestAcceptanceRatio:

    def test_standard_form(self):
        assert acceptance_ratio(0.4, 0.2, 2.0) == pytest.approx(1.0)

    def test_literal_form(self):
        assert acceptance_ratio(0.4, 0.2, 2.0, form='literal') == pytest.approx(0.04)

    def test_zero_proposal_density_is_not_finite(self):
        assert not np.isfinite(acceptance_ratio(0.4, 0.0, 2.0))


class TestAcceptanceRejectionSample:

    def test_never_more_than_trials(self, ratio_spec, summaries, sample):
        cfg = RejectionConfig(n_trials=300, k=0.5, seed=1)
        result = acceptance_rejection_sample(ratio_spec, summaries, sample, cfg, verbose=False)
        assert isinstance(result, RejectionResult)
        assert result.n_accepted <= cfg.n_trials
        assert result.n_accepted + result.n_skipped <= cfg.n_trials
        assert 0.0 <= result.acceptance_rate <= 1.0

    def test_reproducible_with_seed(self, ratio_spec, summaries, sample):
        cfg = RejectionConfig(n_trials=200, seed=5)
        a = acceptance_rejection_sample(ratio_spec, summaries, sample, cfg, verbose=False)
        b = acceptance_rejection_sample(ratio_spec, summaries, sample, cfg, verbose=False)
        np.testing.assert_array_equal(a.accepted, b.accepted)
        assert a.n_skipped == b.n_skipped

    def test_accepted_values_plausible(self, ratio_spec, summaries, sample):
        cfg = RejectionConfig(n_trials=500, k=0.5, seed=2)
        result = acceptance_rejection_sample(ratio_spec, summaries, sample, cfg, verbose=False)
        assert result.n_accepted > 0
        assert np.all(np.isfinite(result.accepted))
        lo, hi = sample.strength.min(), sample.strength.max()
        spread = hi - lo
        assert np.all((result.accepted > lo - spread) & (result.accepted < hi + spread))

    def test_degenerate_noise_skipped(self, ratio_spec, sample):
        # Negative posterior noise scale: every trial is degenerate
        summaries = {
            name: ParameterSummary(name, ratio_spec.prior(name).mu, 0.0)
            for name in ratio_spec.parameter_names
        }
        summaries['sigma'] = ParameterSummary('sigma', -1.0, 0.0)
        cfg = RejectionConfig(n_trials=50, seed=0)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            result = acceptance_rejection_sample(ratio_spec, summaries, sample, cfg, verbose=False)
        assert result.n_accepted == 0
        assert result.n_skipped == 50

    def test_non_finite_density_skipped(self, sample):
        # Prior noise centred below zero: the proposal density is NaN on most trials
        from plastic_strength.models import PriorSpec, RegressionModelSpec
        spec = RegressionModelSpec('ratio', RATIO_REGRESSORS, {
            'intercept': PriorSpec('intercept', 18.0, 1.0),
            'beta_pressure_per_temperature': PriorSpec('beta_pressure_per_temperature', 55.0, 1.0),
            'sigma': PriorSpec('sigma', -5.0, 100.0),
        })
        summaries = {
            'intercept': ParameterSummary('intercept', 18.0, 0.1),
            'beta_pressure_per_temperature': ParameterSummary('beta_pressure_per_temperature', 55.0, 0.1),
            'sigma': ParameterSummary('sigma', 1.5, 0.05),
        }
        cfg = RejectionConfig(n_trials=100, seed=3)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            result = acceptance_rejection_sample(spec, summaries, sample, cfg, verbose=False)
        assert result.n_skipped == 100
        assert result.n_accepted == 0

    def test_low_acceptance_warns(self, sample):
        # Priors match the posterior, so f / g stays near 1 and k dominates
        from plastic_strength.models import PriorSpec, RegressionModelSpec
        means = {'intercept': 18.0, 'beta_pressure_per_temperature': 55.0, 'sigma': 1.5}
        spec = RegressionModelSpec('ratio', RATIO_REGRESSORS, {
            name: PriorSpec(name, mu, 100.0) for name, mu in means.items()
        })
        summaries = {name: ParameterSummary(name, mu, 0.1) for name, mu in means.items()}
        cfg = RejectionConfig(n_trials=50, k=1e12, seed=4)
        with pytest.warns(UserWarning, match="Acceptance rate"):
            result = acceptance_rejection_sample(spec, summaries, sample, cfg, verbose=False)
        assert result.n_accepted == 0

    def test_missing_summary_raises(self, ratio_spec, summaries, sample):
        del summaries['sigma']
        with pytest.raises(ValueError, match="sigma"):
            acceptance_rejection_sample(ratio_spec, summaries, sample, verbose=False)

    def test_zero_trials(self, ratio_spec, summaries, sample):
        result = acceptance_rejection_sample(ratio_spec, summaries, sample,
                                             RejectionConfig(n_trials=0), verbose=False)
        assert result.n_accepted == 0
        assert result.acceptance_rate == 0.0
