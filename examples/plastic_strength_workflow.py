"""
Plastic Strength — Model Comparison Workflow
=============================================
Step-by-step version of run_analysis(), for working with the intermediate
objects directly.

Workflow:
1. Write the synthetic population to a text table and load it back
2. Draw the 100-row subsample
3. Least-squares seeds -> priors for both models
4. MCMC for both models, posterior summaries
5. Posterior predictive, MSE, DIC
6. Acceptance-rejection draws from the preferred model, comparing the
   standard and literal ratio forms
"""

import numpy as np

from plastic_strength import (
    generate_population, write_population, load_strength_table, subsample,
    least_squares_fit, multiple_regression_spec, ratio_regression_spec,
    BayesianRegression, BayesianConfig, RejectionConfig,
    acceptance_rejection_sample, compare_models,
)
from plastic_strength.models import MULTIPLE_REGRESSORS, RATIO_REGRESSORS
from plastic_strength.posterior import format_summary


def main(table_path: str = 'data/plastic_strength.txt'):
    print("[1/6] Preparing strength table...")
    write_population(generate_population(), table_path)
    population = load_strength_table(table_path)

    print("\n[2/6] Subsampling...")
    sample = subsample(population)
    print(f"  {len(sample)} rows")

    print("\n[3/6] Least-squares seeds...")
    specs = {
        'multiple': multiple_regression_spec(least_squares_fit(sample, MULTIPLE_REGRESSORS)),
        'ratio': ratio_regression_spec(least_squares_fit(sample, RATIO_REGRESSORS)),
    }
    for spec in specs.values():
        print(f"  {spec.name}: {spec.formula}")

    print("\n[4/6] MCMC sampling...")
    config = BayesianConfig(n_chains=2, n_draws=2000, n_tune=1000)
    fitted = {}
    for name, spec in specs.items():
        fitted[name] = BayesianRegression(spec, config)
        fitted[name].fit(sample)
        print(format_summary(fitted[name].posterior_draws().summarize(),
                             title=f"\n  Posterior [{name}]"))

    print("\n[5/6] Posterior predictive and comparison...")
    rng = np.random.default_rng(0)
    predictions = {name: model.posterior_predictive(rng) for name, model in fitted.items()}
    comparison = compare_models(
        {name: (model.posterior_draws(), model.spec) for name, model in fitted.items()},
        sample, predictions=predictions,
    )

    print("\n[6/6] Acceptance-rejection...")
    best = fitted[comparison.preferred]
    summaries = best.posterior_draws().summarize()
    for ratio in ('standard', 'literal'):
        acceptance_rejection_sample(best.spec, summaries, sample,
                                    RejectionConfig(n_trials=2000, k=2.0, ratio=ratio))

    print("\n✓ Workflow complete!")


if __name__ == '__main__':
    main()
