"""
Plastic Strength - Bayesian regression of plastic strength on temperature
and pressure, with MCMC posterior sampling and DIC-based model comparison.
"""

__version__ = "0.1.0"

# Data
from .data import (
    StrengthData,
    load_strength_table,
    subsample,
    generate_population,
    write_population,
)

# Models
from .models import (
    PriorSpec,
    RegressionModelSpec,
    LeastSquaresFit,
    least_squares_fit,
    multiple_regression_spec,
    ratio_regression_spec,
)

# Posterior records and comparison
from .posterior import ParameterDraws, ParameterSummary, PosteriorDraws, posterior_predictive
from .comparison import mean_squared_error, deviance_information_criterion, compare_models
from .rejection import RejectionConfig, acceptance_rejection_sample

# MCMC and the pipeline need PyMC
try:
    from .bayesian import BayesianRegression, BayesianConfig
    from .analysis import AnalysisConfig, run_analysis
except ImportError:
    BayesianRegression = None
    BayesianConfig = None
    AnalysisConfig = None
    run_analysis = None

__all__ = [
    "StrengthData",
    "load_strength_table",
    "subsample",
    "generate_population",
    "write_population",
    "PriorSpec",
    "RegressionModelSpec",
    "LeastSquaresFit",
    "least_squares_fit",
    "multiple_regression_spec",
    "ratio_regression_spec",
    "ParameterDraws",
    "ParameterSummary",
    "PosteriorDraws",
    "posterior_predictive",
    "mean_squared_error",
    "deviance_information_criterion",
    "compare_models",
    "RejectionConfig",
    "acceptance_rejection_sample",
    "BayesianRegression",
    "BayesianConfig",
    "AnalysisConfig",
    "run_analysis",
]
