"""Data preprocessing: identifier removal, label casting and normalization."""

from dataclasses import replace
from typing import Any, Dict, Optional

import pandas as pd
from loguru import logger

from ..exceptions import InsufficientClasses, SchemaMismatch
from .dataset import Dataset, Diagnosis, LABEL_DTYPE
from .feature_scaler import FeatureScaler

DEFAULT_LABEL_MAP = {'B': Diagnosis.BENIGN.value, 'M': Diagnosis.MALIGNANT.value}


class DataPreprocessor:
    """Turns a loaded dataset into model-ready features and labels.

    ``prepare`` handles the structural steps (drop the identifier, cast the
    label, check that both classes are present). ``fit``/``transform`` handle
    min-max normalization so that statistics learned on one dataset (the
    training partition) can be applied verbatim to another.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the DataPreprocessor.

        Args:
            config: Configuration dictionary; ``label_map`` maps raw label
                tokens to ``benign``/``malignant``
        """
        self.config = config or {}
        label_map = self.config.get('label_map') or DEFAULT_LABEL_MAP
        self.label_map = {str(k): Diagnosis(v).value for k, v in label_map.items()}
        self.scaler = FeatureScaler()
        self.fitted = False

    def prepare(self, dataset: Dataset) -> Dataset:
        """
        Drop identifiers and cast labels to the two-valued categorical type.

        Args:
            dataset: Dataset as produced by the loader

        Returns:
            Dataset without identifiers and with categorical labels

        Raises:
            SchemaMismatch: If a label token is not in the label map
            InsufficientClasses: If fewer than two distinct labels are present
        """
        labels = self.cast_labels(dataset.labels)
        check_classes(labels, stage='preprocessor')

        prepared = replace(dataset, labels=labels, identifiers=None)
        logger.info(f"Prepared {len(prepared)} records, class counts: {prepared.label_counts()}")
        return prepared

    def cast_labels(self, labels: pd.Series) -> pd.Series:
        if isinstance(labels.dtype, pd.CategoricalDtype) and labels.dtype == LABEL_DTYPE:
            return labels

        tokens = labels.astype(str).str.strip()
        known = set(self.label_map) | set(self.label_map.values())
        unknown = sorted(set(tokens) - known)
        if unknown:
            raise SchemaMismatch(f"Unknown label tokens: {unknown}", stage='preprocessor')

        mapped = tokens.map(lambda t: self.label_map.get(t, t))
        return mapped.astype(LABEL_DTYPE)

    def fit(self, dataset: Dataset) -> 'DataPreprocessor':
        """Compute per-column min/max on ``dataset``."""
        self.scaler.fit(dataset.features)
        self.fitted = True
        return self

    def transform(self, dataset: Dataset) -> Dataset:
        """Normalize ``dataset`` with the fitted statistics."""
        if not self.fitted:
            raise ValueError("Preprocessor not fitted")
        scaled = self.scaler.transform(dataset.features)
        return replace(dataset, features=scaled, scaling=self.scaler.stats)

    def fit_transform(self, dataset: Dataset) -> Dataset:
        """Prepare, fit and normalize in one step."""
        prepared = self.prepare(dataset)
        return self.fit(prepared).transform(prepared)


def check_classes(labels: pd.Series, stage: str) -> None:
    """Raise ``InsufficientClasses`` unless at least two labels are observed."""
    observed = labels.dropna().astype(object).unique()
    if len(observed) < 2:
        raise InsufficientClasses(
            f"Need two distinct labels, observed {sorted(map(str, observed))}",
            stage=stage,
        )
