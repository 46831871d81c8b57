"""
Plastic Strength — Test Suite
=============================

Test modules:
- test_data.py: table loading and subsampling
- test_exploratory.py: descriptive summary
- test_models.py: priors, least-squares seeds, model specs
- test_posterior.py: posterior records and predictive sampling
- test_comparison.py: MSE and DIC
- test_rejection.py: acceptance-rejection sampler
- test_bayesian.py: PyMC sampling (slow tests marked)
- test_analysis.py: end-to-end pipeline (slow)
"""
