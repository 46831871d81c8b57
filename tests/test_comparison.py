"""
Unit tests for MSE, DIC and the model comparison report
"""

import pytest
import numpy as np

from plastic_strength.models import (
    least_squares_fit, multiple_regression_spec, ratio_regression_spec,
    MULTIPLE_REGRESSORS, RATIO_REGRESSORS,
)
from plastic_strength.posterior import PosteriorDraws
from plastic_strength.comparison import (
    mean_squared_error, deviance_information_criterion,
    compare_models, ModelComparison, DICResult,
)


def _draws_around_fit(spec, fit, n_draws=1000, scale=0.02, seed=0):
    """Synthetic draws centred on the least-squares estimates."""
    rng = np.random.default_rng(seed)
    arrays = {}
    for name, value in fit.coefficients.items():
        arrays[name] = value + rng.normal(0.0, scale * (abs(value) + 1e-3), n_draws)
    arrays['sigma'] = fit.residual_std * np.exp(rng.normal(0.0, 0.05, n_draws))
    return PosteriorDraws.from_arrays({n: arrays[n] for n in spec.parameter_names})


@pytest.fixture
def fitted(sample):
    fits = {
        'multiple': least_squares_fit(sample, MULTIPLE_REGRESSORS),
        'ratio': least_squares_fit(sample, RATIO_REGRESSORS),
    }
    specs = {
        'multiple': multiple_regression_spec(fits['multiple']),
        'ratio': ratio_regression_spec(fits['ratio']),
    }
    draws = {name: _draws_around_fit(specs[name], fits[name]) for name in specs}
    return fits, specs, draws


class TestMeanSquaredError:

    def test_identity_is_zero(self, reset_seeds):
        y = np.random.randn(100)
        assert mean_squared_error(y, y) == 0.0

    def test_known_value(self):
        assert mean_squared_error([1.0, 2.0, 3.0], [2.0, 2.0, 5.0]) == pytest.approx(5.0 / 3.0)

    def test_order_insensitive(self):
        rng = np.random.default_rng(0)
        y, p = rng.normal(size=50), rng.normal(size=50)
        perm = rng.permutation(50)
        assert mean_squared_error(y[perm], p[perm]) == pytest.approx(mean_squared_error(y, p))

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="mismatch"):
            mean_squared_error([1.0, 2.0], [1.0])

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            mean_squared_error([], [])


class TestDIC:

    def test_components_consistent(self, fitted, sample):
        _, specs, draws = fitted
        result = deviance_information_criterion(draws['ratio'], specs['ratio'], sample)
        assert isinstance(result, DICResult)
        assert result.dic == pytest.approx(result.mean_deviance + result.p_d)
        assert result.p_d == pytest.approx(result.mean_deviance - result.deviance_at_mean)
        assert result.p_v >= 0.0

    def test_mean_deviance_exceeds_plug_in(self, fitted, sample):
        # Deviance is convex near the optimum, so pD > 0 for draws around the MLE
        _, specs, draws = fitted
        result = deviance_information_criterion(draws['multiple'], specs['multiple'], sample)
        assert result.p_d > 0.0

    def test_invariant_to_row_order(self, fitted, sample):
        _, specs, draws = fitted
        shuffled = sample.permuted(np.random.default_rng(8))
        a = deviance_information_criterion(draws['ratio'], specs['ratio'], sample)
        b = deviance_information_criterion(draws['ratio'], specs['ratio'], shuffled)
        assert a.dic == pytest.approx(b.dic, rel=1e-10)
        assert a.p_d == pytest.approx(b.p_d, rel=1e-8, abs=1e-8)

    def test_matches_direct_computation(self, fitted, sample):
        from scipy import stats
        _, specs, draws = fitted
        spec, d = specs['ratio'], draws['ratio']
        i = 17
        coef = d.matrix(spec.coefficient_names)[i]
        mu = spec.linear_predictor(sample, coef)
        direct = -2.0 * stats.norm.logpdf(sample.strength, mu, d['sigma'].values[i]).sum()

        from plastic_strength.comparison import _deviance
        assert _deviance(spec, sample, coef[None, :], d['sigma'].values[i:i + 1])[0] == \
            pytest.approx(direct)

    def test_report_text(self, fitted, sample):
        _, specs, draws = fitted
        text = deviance_information_criterion(draws['ratio'], specs['ratio'], sample).report('ratio')
        assert 'DIC [ratio]' in text
        assert 'Penalized deviance' in text


class TestCompareModels:

    def test_ratio_model_preferred(self, fitted, sample):
        # The population follows the pressure/temperature law
        _, specs, draws = fitted
        comparison = compare_models({n: (draws[n], specs[n]) for n in specs},
                                    sample, verbose=False)
        assert comparison.preferred == 'ratio'
        assert comparison.dic['ratio'].dic < comparison.dic['multiple'].dic

    def test_mse_only_for_given_predictions(self, fitted, sample):
        _, specs, draws = fitted
        comparison = compare_models({n: (draws[n], specs[n]) for n in specs}, sample,
                                    predictions={'ratio': sample.strength}, verbose=False)
        assert comparison.mse == {'ratio': 0.0}
        assert 'Preferred model' in comparison.report()

    def test_empty_comparison(self):
        with pytest.raises(ValueError):
            ModelComparison().preferred
