"""
Descriptive summaries and plots of a strength sample.

Exploratory only: nothing downstream depends on these results.
"""
from typing import Dict, Optional

import pandas as pd

try:
    import matplotlib.pyplot as plt
    import seaborn as sns
    PLOTTING_AVAILABLE = True
    sns.set_style('whitegrid')
except ImportError:
    PLOTTING_AVAILABLE = False

from .data import StrengthData


def describe_dataset(data: StrengthData) -> Dict[str, pd.DataFrame]:
    """Column statistics and pairwise correlations (including the P/T ratio)."""
    df = data.to_frame()
    df['pressure_per_temperature'] = df['pressure'] / df['temperature']
    return {
        'describe': df.describe(),
        'correlation': df.corr(),
    }


def plot_exploratory(data: StrengthData, save_path: Optional[str] = None):
    """Histograms of each column, and strength against each candidate regressor."""
    if not PLOTTING_AVAILABLE:
        print("[Warning] Matplotlib/Seaborn not available for plotting")
        return

    df = data.to_frame()
    df['pressure/temperature'] = df['pressure'] / df['temperature']

    fig, axes = plt.subplots(2, 3, figsize=(15, 9))

    for ax, col in zip(axes[0], ['temperature', 'pressure', 'strength']):
        sns.histplot(df[col], bins=20, kde=True, ax=ax)
        ax.set_title(f'{col} (n={len(df)})')

    for ax, col in zip(axes[1], ['temperature', 'pressure', 'pressure/temperature']):
        sns.regplot(x=col, y='strength', data=df, ax=ax,
                    scatter_kws={'s': 15, 'alpha': 0.7}, line_kws={'color': 'C3'})
        ax.set_title(f'strength vs {col}')

    plt.tight_layout()
    if save_path:
        plt.savefig(f"{save_path}_exploratory.png", dpi=150, bbox_inches='tight')
    plt.show()
