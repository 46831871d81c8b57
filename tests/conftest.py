"""
Pytest configuration and fixtures for reproducible testing.

This file provides centralized test configuration including:
- Random seed management for reproducibility
- Shared strength-data fixtures
- The 'slow' marker for MCMC runs
"""
import pytest
import numpy as np

from plastic_strength.data import StrengthData, generate_population, subsample


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: long-running MCMC tests")


@pytest.fixture(scope="session", autouse=True)
def set_random_seeds():
    """Set the global NumPy seed once per session."""
    np.random.seed(42)
    yield


@pytest.fixture(scope="function")
def reset_seeds():
    """Reset the global NumPy seed before a test that needs fresh state."""
    np.random.seed(42)
    yield


@pytest.fixture(scope="session")
def population():
    """Synthetic population of 1650 observations."""
    return generate_population()


@pytest.fixture(scope="session")
def sample(population):
    """Fixed 100-row subsample of the population."""
    return subsample(population, 100, seed=1234)


@pytest.fixture
def linear_data():
    """Noise-free strength = 10 + 0.5·T - 0.25·P."""
    rng = np.random.default_rng(0)
    temperature = rng.uniform(150.0, 250.0, 50)
    pressure = rng.uniform(50.0, 150.0, 50)
    return StrengthData(temperature=temperature,
                        pressure=pressure,
                        strength=10.0 + 0.5 * temperature - 0.25 * pressure)
