"""
Plastic Strength — Complete Analysis Pipeline
=============================================
Runs the whole comparison of the two regression models, top to bottom:

1. Load the strength table (or generate the synthetic population) and draw
   a fixed-size uniform subsample
2. Exploratory summary of the sample
3. Ordinary least squares, to centre the priors
4. Bayesian model A: strength ~ temperature + pressure
5. Bayesian model B: strength ~ pressure / temperature
6. Posterior predictive sampling for both models
7. Model comparison (MSE, DIC) and the acceptance-rejection illustration

Nothing is kept in module state: every step receives what it needs as an
argument and the results come back in an AnalysisResult.
"""

import dataclasses
import numpy as np
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

from .data import (
    StrengthData, load_strength_table, subsample, generate_population,
    POPULATION_SIZE, SAMPLE_SIZE, DEFAULT_SEED,
)
from .exploratory import describe_dataset, plot_exploratory
from .models import (
    LeastSquaresFit, RegressionModelSpec, least_squares_fit,
    multiple_regression_spec, ratio_regression_spec,
    MULTIPLE_REGRESSORS, RATIO_REGRESSORS,
)
from .bayesian import BayesianRegression, BayesianConfig
from .posterior import PosteriorDraws, ParameterSummary, format_summary
from .comparison import ModelComparison, compare_models
from .rejection import RejectionConfig, RejectionResult, acceptance_rejection_sample


@dataclass
class AnalysisConfig:
    """Fixed settings of the analysis."""
    population_size: int = POPULATION_SIZE
    sample_size: int = SAMPLE_SIZE
    seed: int = DEFAULT_SEED
    predictive_seed: int = 7

    bayesian: BayesianConfig = field(default_factory=BayesianConfig)
    rejection: RejectionConfig = field(default_factory=RejectionConfig)

    # Per-parameter prior precision overrides
    multiple_precisions: Dict[str, float] = field(default_factory=dict)
    ratio_precisions: Dict[str, float] = field(default_factory=dict)

    plot: bool = False
    save_path: Optional[str] = None


@dataclass
class AnalysisResult:
    sample: StrengthData
    least_squares: Dict[str, LeastSquaresFit]
    specs: Dict[str, RegressionModelSpec]
    draws: Dict[str, PosteriorDraws]
    summaries: Dict[str, Dict[str, ParameterSummary]]
    predictions: Dict[str, np.ndarray]
    comparison: ModelComparison
    rejection: RejectionResult


def run_analysis(data_path: Optional[Union[str, Path]] = None,
                 config: Optional[AnalysisConfig] = None,
                 verbose: bool = True) -> AnalysisResult:
    """Fit, summarise and compare both regression models.

    Args:
        data_path: Strength table to load; None generates the synthetic
            population
        config: Analysis settings
        verbose: Print progress and reports

    Returns:
        AnalysisResult with every intermediate result
    """
    config = config or AnalysisConfig()
    bayes_config = dataclasses.replace(config.bayesian,
                                       verbose=config.bayesian.verbose and verbose)

    def log(msg: str = ''):
        if verbose:
            print(msg)

    # Step 1: Data
    log("\n[1/7] Loading data...")
    if data_path is None:
        population = generate_population(config.population_size, seed=config.seed)
        log(f"  Generated synthetic population of {len(population)} observations")
    else:
        population = load_strength_table(data_path, verbose=verbose)
    sample = subsample(population, config.sample_size, seed=config.seed)
    log(f"  Subsample: {len(sample)} rows (seed={config.seed})")

    # Step 2: Exploratory summary
    log("\n[2/7] Exploratory summary...")
    description = describe_dataset(sample)
    log(description['describe'].round(3).to_string())
    log("\n  Correlations with strength:")
    log(description['correlation']['strength'].round(3).to_string())
    if config.plot:
        plot_exploratory(sample, save_path=config.save_path)

    # Step 3: Least-squares seeds
    log("\n[3/7] Least-squares seed fits...")
    ols = {
        'multiple': least_squares_fit(sample, MULTIPLE_REGRESSORS),
        'ratio': least_squares_fit(sample, RATIO_REGRESSORS),
    }
    for name, fit in ols.items():
        coefs = ', '.join(f"{k}={v:.4f}" for k, v in fit.coefficients.items())
        log(f"  {name}: {coefs}, residual_std={fit.residual_std:.4f}, R²={fit.r_squared:.3f}")

    specs = {
        'multiple': multiple_regression_spec(ols['multiple'], config.multiple_precisions),
        'ratio': ratio_regression_spec(ols['ratio'], config.ratio_precisions),
    }

    # Steps 4-5: Bayesian models
    draws = {}
    summaries = {}
    fitted = {}
    for step, name in (('4/7', 'multiple'), ('5/7', 'ratio')):
        log(f"\n[{step}] Bayesian model '{name}': {specs[name].formula}")
        model = BayesianRegression(specs[name], bayes_config)
        model.fit(sample)
        fitted[name] = model
        draws[name] = model.posterior_draws()
        summaries[name] = draws[name].summarize()
        log(format_summary(summaries[name],
                           title=f"  Posterior ({len(draws[name])} retained draws):"))
        if config.plot:
            save = f"{config.save_path}_{name}" if config.save_path else None
            model.plot_posterior(save_path=save)

    # Step 6: Posterior predictive
    log("\n[6/7] Posterior predictive sampling...")
    rng = np.random.default_rng(config.predictive_seed)
    predictions = {name: fitted[name].posterior_predictive(rng) for name in specs}
    for name, pred in predictions.items():
        log(f"  {name}: {len(pred)} synthetic responses, "
            f"mean={pred.mean():.3f} (observed {sample.strength.mean():.3f})")

    # Step 7: Comparison
    log("\n[7/7] Model comparison...")
    comparison = compare_models(
        {name: (draws[name], specs[name]) for name in specs},
        sample,
        predictions=predictions,
        verbose=verbose,
    )

    preferred = comparison.preferred
    rejection = acceptance_rejection_sample(
        specs[preferred], summaries[preferred], sample,
        config=config.rejection, verbose=verbose,
    )

    log("\n✓ Analysis complete!")

    return AnalysisResult(
        sample=sample,
        least_squares=ols,
        specs=specs,
        draws=draws,
        summaries=summaries,
        predictions=predictions,
        comparison=comparison,
        rejection=rejection,
    )


# ═══════════════════════════════════════════════════════════════
# Demo
# ═══════════════════════════════════════════════════════════════

def demo_analysis():
    """Run the analysis on the synthetic population with demo settings."""
    print("╔══════════════════════════════════════════════════════════╗")
    print("║  Plastic Strength — Bayesian Model Comparison Demo       ║")
    print("╚══════════════════════════════════════════════════════════╝")

    config = AnalysisConfig(
        bayesian=BayesianConfig(n_chains=2, n_draws=2000, n_tune=1000),
    )
    result = run_analysis(config=config)

    print(f"\nPreferred model: {result.comparison.preferred}")
    print("Note: demo uses 2 chains × 2000 draws. "
          "The default configuration uses 3 chains × 5000 draws.")
    return result


if __name__ == '__main__':
    demo_analysis()
