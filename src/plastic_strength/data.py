"""
Plastic strength data loading utilities.

Supports whitespace- or comma-delimited text tables with a header row:

    temperature  pressure  strength
    212.4        97.1      51.38
    187.9        63.0      45.02
    ...

The observation table is immutable: every transform (subsample, permutation,
row selection) returns a new table, so the same data can be passed to
several models without one of them mutating it for the others.
"""
import numpy as np
import pandas as pd
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union


REQUIRED_COLUMNS = ('temperature', 'pressure', 'strength')

# Sampling literals of the analysis
POPULATION_SIZE = 1650
SAMPLE_SIZE = 100
DEFAULT_SEED = 1234


@dataclass(frozen=True)
class StrengthData:
    """Aligned temperature / pressure / strength observations."""
    temperature: np.ndarray
    pressure: np.ndarray
    strength: np.ndarray

    def __post_init__(self):
        arrays = {}
        for name in REQUIRED_COLUMNS:
            values = np.array(getattr(self, name), dtype=np.float64)
            if values.ndim != 1:
                raise ValueError(f"'{name}' must be 1D, got shape {values.shape}")
            if not np.all(np.isfinite(values)):
                raise ValueError(f"'{name}' contains non-finite values")
            values.setflags(write=False)
            arrays[name] = values

        lengths = {len(v) for v in arrays.values()}
        if len(lengths) != 1:
            raise ValueError(
                f"Column length mismatch: "
                + ", ".join(f"{k}={len(v)}" for k, v in arrays.items())
            )

        # Frozen dataclass: bypass __setattr__ to store the read-only copies
        for name, values in arrays.items():
            object.__setattr__(self, name, values)

    def __len__(self) -> int:
        return len(self.strength)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> 'StrengthData':
        return cls(
            temperature=df['temperature'].values,
            pressure=df['pressure'].values,
            strength=df['strength'].values,
        )

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({name: np.array(getattr(self, name))
                             for name in REQUIRED_COLUMNS})

    def take(self, indices: Sequence[int]) -> 'StrengthData':
        """New table holding the given rows, in the given order."""
        idx = np.asarray(indices, dtype=int)
        return StrengthData(
            temperature=self.temperature[idx],
            pressure=self.pressure[idx],
            strength=self.strength[idx],
        )

    def permuted(self, rng: np.random.Generator) -> 'StrengthData':
        return self.take(rng.permutation(len(self)))


def load_strength_table(filepath: Union[str, Path],
                        delimiter: Optional[str] = None,
                        verbose: bool = True) -> StrengthData:
    """Load a plastic strength table from a delimited text file.

    Args:
        filepath: Path to the table (header row required).
        delimiter: Column separator. None means any run of whitespace.
        verbose: Print a load summary.

    Returns:
        StrengthData with every row of the file.

    Raises:
        FileNotFoundError: File does not exist.
        ValueError: Required column missing, rows that do not match the
            header, or rows that are not numeric.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Strength table not found: {filepath}")

    sep = r'\s+' if delimiter is None else delimiter
    _engine = 'python' if len(sep) > 1 else 'c'
    try:
        df = pd.read_csv(filepath, sep=sep, engine=_engine)
    except pd.errors.ParserError as e:
        raise ValueError(f"Rows in {filepath.name} do not match the header: {e}") from e

    # pandas turns surplus leading fields into an index instead of failing
    if not isinstance(df.index, pd.RangeIndex):
        raise ValueError(f"Rows in {filepath.name} have more fields than the header "
                         f"({len(df.columns)} columns)")

    df.columns = [str(c).strip().lower() for c in df.columns]

    for col in REQUIRED_COLUMNS:
        if col not in df.columns:
            raise ValueError(f"Column '{col}' not found in {filepath.name} "
                             f"(columns: {list(df.columns)})")

    numeric = df[list(REQUIRED_COLUMNS)].apply(pd.to_numeric, errors='coerce')
    bad = numeric.isna().any(axis=1) | ~np.isfinite(numeric).all(axis=1)
    if bad.any():
        # +2: one for the header line, one for 1-based numbering
        rows = (np.flatnonzero(bad.values) + 2).tolist()
        shown = rows[:10]
        more = f" (and {len(rows) - 10} more)" if len(rows) > 10 else ""
        raise ValueError(f"Malformed rows in {filepath.name} at lines {shown}{more}")

    data = StrengthData.from_frame(numeric)

    if verbose:
        print(f"[Data] Loaded {len(data)} observations from {filepath.name}")
        print(f"  Temperature range: {data.temperature.min():.1f} - {data.temperature.max():.1f}")
        print(f"  Pressure range: {data.pressure.min():.1f} - {data.pressure.max():.1f}")
        print(f"  Strength range: {data.strength.min():.2f} - {data.strength.max():.2f}")

    return data


def subsample(data: StrengthData,
              n: int = SAMPLE_SIZE,
              seed: Optional[int] = DEFAULT_SEED) -> StrengthData:
    """Draw n rows uniformly at random without replacement."""
    if n <= 0:
        raise ValueError(f"Sample size must be positive, got {n}")
    if n > len(data):
        raise ValueError(f"Cannot draw {n} rows from a table of {len(data)}")

    rng = np.random.default_rng(seed)
    indices = rng.choice(len(data), size=n, replace=False)
    return data.take(indices)


def generate_population(n: int = POPULATION_SIZE,
                        seed: Optional[int] = DEFAULT_SEED,
                        noise_std: float = 1.5) -> StrengthData:
    """Synthetic stand-in for the measured plastic strength population.

    Strength follows a pressure/temperature ratio law with a weak linear
    temperature term, so the ratio model fits better than the additive one
    but both are reasonable.

    Args:
        n: Number of observations
        seed: Random seed
        noise_std: Measurement noise standard deviation
    """
    rng = np.random.default_rng(seed)
    temperature = rng.uniform(150.0, 260.0, n)     # °C
    pressure = rng.uniform(40.0, 160.0, n)         # bar
    strength = (18.0 + 55.0 * pressure / temperature
                - 0.01 * (temperature - 200.0)
                + rng.normal(0.0, noise_std, n))   # MPa
    return StrengthData(temperature=np.round(temperature, 1),
                        pressure=np.round(pressure, 1),
                        strength=np.round(strength, 2))


def write_population(data: StrengthData,
                     filepath: Union[str, Path]) -> Path:
    """Write a table as whitespace-delimited text, readable by load_strength_table."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    df = data.to_frame()
    with open(filepath, 'w') as f:
        f.write(''.join(f"{c:>14}" for c in df.columns).strip() + '\n')
        for row in df.itertuples(index=False):
            f.write(''.join(f"{v:>14.4f}" for v in row).strip() + '\n')

    print(f"[OK] Wrote {len(df)} observations to {filepath}")
    return filepath
