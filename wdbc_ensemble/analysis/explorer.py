"""Exploratory analysis of the tumor measurements, including PCA."""

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from wdbc_ensemble import config
from wdbc_ensemble.data.loader import Dataset
from wdbc_ensemble.utils import get_logger

log = get_logger(__name__)


class DataExplorer:
    """Summarizes feature distributions and their relation to the diagnosis."""

    def __init__(self, variance_target: float = config.PCA_VARIANCE_TARGET):
        self.variance_target = variance_target
        self.report = {}

    def run(self, dataset: Dataset) -> dict:
        """
        Run full exploratory analysis on a dataset.

        Returns a report dict with one section per analysis.
        """
        df = dataset.features
        labels = dataset.labels

        log.info("Running exploratory data analysis on %d samples", len(df))

        self.report = {
            "basic_stats": self._basic_stats(df),
            "class_balance": self._class_balance(labels),
            "feature_correlations": self._correlations(df),
            "top_discriminative_features": self._discriminative_features(df, labels),
            "outlier_summary": self._outlier_analysis(df),
            "principal_components": self._principal_components(df, labels),
        }

        log.info("EDA complete: %d analysis sections generated", len(self.report))
        return self.report

    def _basic_stats(self, df: pd.DataFrame) -> dict:
        """Per-feature summary statistics, plus which feature has the largest mean and spread."""
        desc = df.describe()
        return {
            "shape": list(df.shape),
            "summary": desc.to_dict(),
            "highest_mean_feature": desc.loc["mean"].idxmax(),
            "highest_std_feature": desc.loc["std"].idxmax(),
        }

    def _class_balance(self, labels: pd.Series) -> dict:
        counts = labels.value_counts()
        proportions = labels.value_counts(normalize=True)
        imbalance_ratio = counts.max() / counts.min() if counts.min() > 0 else float("inf")

        balance_status = "balanced" if imbalance_ratio < 1.5 else (
            "moderate_imbalance" if imbalance_ratio < 3.0 else "severe_imbalance"
        )

        log.info(
            "Class balance: %s (ratio=%.2f, %s share=%.3f)",
            balance_status, imbalance_ratio, config.BENIGN,
            proportions.get(config.BENIGN, 0.0),
        )

        return {
            "counts": counts.to_dict(),
            "proportions": proportions.to_dict(),
            "imbalance_ratio": imbalance_ratio,
            "status": balance_status,
        }

    def _correlations(self, df: pd.DataFrame) -> dict:
        """Find strongly correlated feature pairs."""
        features = list(df.columns)
        corr_matrix = df.corr()
        threshold = config.HIGH_CORRELATION_THRESHOLD

        high_corr_pairs = []
        for i in range(len(features)):
            for j in range(i + 1, len(features)):
                r = corr_matrix.iloc[i, j]
                if abs(r) > threshold:
                    high_corr_pairs.append({
                        "feature_1": features[i],
                        "feature_2": features[j],
                        "correlation": round(float(r), 4),
                    })

        high_corr_pairs.sort(key=lambda x: abs(x["correlation"]), reverse=True)
        log.info(
            "Found %d highly correlated feature pairs (|r|>%.1f)",
            len(high_corr_pairs), threshold,
        )

        return {
            "highly_correlated_pairs": high_corr_pairs,
            "n_highly_correlated": len(high_corr_pairs),
        }

    def _discriminative_features(self, df: pd.DataFrame, labels: pd.Series) -> list[dict]:
        """
        Rank features by a two-sample t-test between benign and malignant.
        """
        benign = df[labels == config.BENIGN]
        malignant = df[labels == config.MALIGNANT]
        if len(benign) < 2 or len(malignant) < 2:
            log.warning("Discriminative analysis needs at least 2 samples per class")
            return []

        results = []
        for feat in df.columns:
            t_stat, p_val = stats.ttest_ind(malignant[feat], benign[feat])
            std = df[feat].std()
            effect_size = abs(malignant[feat].mean() - benign[feat].mean()) / std if std > 0 else 0.0

            results.append({
                "feature": feat,
                "t_statistic": round(float(t_stat), 4),
                "p_value": float(p_val),
                "effect_size_cohens_d": round(float(effect_size), 4),
            })

        results.sort(key=lambda x: abs(x["t_statistic"]), reverse=True)
        top_n = results[:10]

        log.info("Top discriminative features:")
        for i, r in enumerate(top_n[:5]):
            log.info(
                "  %d. %s (t=%.2f, d=%.2f, p=%.2e)",
                i + 1, r["feature"], r["t_statistic"],
                r["effect_size_cohens_d"], r["p_value"],
            )

        return top_n

    def _outlier_analysis(self, df: pd.DataFrame) -> dict:
        """Detect outliers using IQR method."""
        outlier_counts = {}
        total_outliers = 0

        for feat in df.columns:
            q1 = df[feat].quantile(0.25)
            q3 = df[feat].quantile(0.75)
            iqr = q3 - q1
            lower = q1 - 1.5 * iqr
            upper = q3 + 1.5 * iqr
            n_outliers = int(((df[feat] < lower) | (df[feat] > upper)).sum())
            if n_outliers > 0:
                outlier_counts[feat] = n_outliers
                total_outliers += n_outliers

        log.info(
            "Outlier analysis: %d total outliers across %d features",
            total_outliers, len(outlier_counts),
        )

        return {
            "features_with_outliers": outlier_counts,
            "total_outlier_values": total_outliers,
            "n_features_with_outliers": len(outlier_counts),
        }

    def _principal_components(self, df: pd.DataFrame, labels: pd.Series) -> dict:
        """PCA on standardized features: variance explained and class means on PC1/PC2.

        Exploration only; the models are trained on the scaled features, not
        on the components.
        """
        n_components = min(df.shape)
        if n_components < 2:
            log.warning("PCA needs at least 2 samples and 2 features")
            return {}

        scaled = StandardScaler().fit_transform(df.to_numpy(dtype=float))
        pca = PCA(n_components=n_components).fit(scaled)
        scores = pca.transform(scaled)

        ratio = pca.explained_variance_ratio_
        cumulative = np.cumsum(ratio)
        n_for_target = int(np.searchsorted(cumulative, self.variance_target) + 1)
        n_for_target = min(n_for_target, n_components)

        class_means = {}
        for label in config.LABELS:
            mask = (labels == label).to_numpy()
            if mask.any():
                class_means[label] = {
                    "pc1": round(float(scores[mask, 0].mean()), 4),
                    "pc2": round(float(scores[mask, 1].mean()), 4),
                }

        top_loadings = sorted(
            zip(df.columns, pca.components_[0]),
            key=lambda x: abs(x[1]), reverse=True,
        )[:5]

        log.info(
            "PCA: PC1 explains %.1f%% of variance; %d components reach %.0f%%",
            ratio[0] * 100, n_for_target, self.variance_target * 100,
        )

        return {
            "explained_variance_ratio": [round(float(r), 6) for r in ratio],
            "cumulative_variance": [round(float(c), 6) for c in cumulative],
            "n_components_for_target": n_for_target,
            "variance_target": self.variance_target,
            "class_means": class_means,
            "pc1_top_loadings": [
                {"feature": f, "loading": round(float(w), 4)} for f, w in top_loadings
            ],
        }
