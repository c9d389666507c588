import math
import matplotlib.pyplot as plt
import seaborn as sns
import pandas as pd
import numpy as np

def plot_detection_errors(summary, bins=None, figsize=(10, 6)):
    """
    Histogram of signed detection errors (weeks) of the true positives.
    """
    errors = summary.detection_errors() if summary is not None else []
    if not errors:
        print("No detection errors to plot.")
        return

    if bins is None:
        # Sturges' rule
        bins = int(math.ceil(1 + 3.322 * math.log10(len(errors))))

    fig = plt.figure(figsize=figsize)
    sns.histplot(x=np.asarray(errors), bins=bins, color='steelblue')
    plt.title(f'Detection Error Distribution [n={len(errors)}]')
    plt.xlabel('Detection Error (weeks)')
    plt.ylabel('Frequency')
    plt.tight_layout()
    return fig

def plot_cusum(signal, cusum_result, threshold, churn_index=None, figsize=(12, 6)):
    """
    Weekly signal and its CUSUM trace with the +/- threshold band and the
    detected (and optionally actual) churn week.
    """
    if signal is None or len(signal) == 0:
        print("No signal to plot.")
        return

    weeks = np.arange(len(signal))
    df_plot = pd.DataFrame({
        'Week': np.concatenate((weeks, weeks)),
        'Value': np.concatenate((np.asarray(signal, dtype=float), cusum_result.cusum_values[1:])),
        'Series': ['Signal'] * len(weeks) + ['CUSUM'] * len(weeks),
    })

    fig = plt.figure(figsize=figsize)
    sns.lineplot(data=df_plot, x='Week', y='Value', hue='Series')
    plt.axhline(threshold, color='grey', linestyle='--')
    plt.axhline(-threshold, color='grey', linestyle='--')
    if cusum_result.anomaly_index is not None:
        plt.axvline(cusum_result.anomaly_index, color='red', label='Detected churn')
    if churn_index is not None:
        plt.axvline(churn_index, color='green', linestyle=':', label='Actual churn')
    plt.title('CUSUM Churn Detection')
    plt.legend()
    plt.tight_layout()
    return fig
