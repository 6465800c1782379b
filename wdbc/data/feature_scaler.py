"""
Feature Scaler Module
====================

Min-max feature scaling with a fixed policy for constant columns.

"""

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler
from loguru import logger

from .dataset import MinMaxStats


class FeatureScaler:
    """Min-max scaler fitted once and reused verbatim on later data.

    A column whose training minimum equals its maximum carries no range to
    scale by; every value in that column maps to 0, on the fitted data and on
    any data transformed afterwards.
    """

    def __init__(self):
        self.scaler = MinMaxScaler(feature_range=(0, 1), clip=False)
        self.columns = None
        self.fitted = False

    def fit(self, X: pd.DataFrame) -> 'FeatureScaler':
        """Learn per-column min and max."""
        self.scaler.fit(X.to_numpy(dtype=float))
        self.columns = list(X.columns)
        self.fitted = True

        n_constant = int(np.sum(self._constant_mask()))
        logger.info(f"Fitted minmax scaler on {X.shape[1]} features ({n_constant} constant)")
        return self

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        """Apply ``(x - min) / (max - min)`` with the fitted statistics."""
        if not self.fitted:
            raise ValueError("Scaler not fitted")
        if list(X.columns) != self.columns:
            raise ValueError("Columns differ from the ones the scaler was fitted on")

        # Same arithmetic as MinMaxScaler.transform but in the subtract-then-divide
        # order so the fitted min and max land exactly on 0 and 1
        constant = self._constant_mask()
        data_range = np.where(constant, 1.0, self.scaler.data_range_)
        scaled = (X.to_numpy(dtype=float) - self.scaler.data_min_) / data_range
        scaled[:, constant] = 0.0
        return pd.DataFrame(scaled, columns=X.columns, index=X.index)

    def fit_transform(self, X_train: pd.DataFrame, *frames: pd.DataFrame):
        """
        Fit on training data and transform all provided frames.

        Args:
            X_train: Training data to fit on
            *frames: Additional frames to transform (e.g. the test side)

        Returns:
            Single frame if only X_train provided, tuple of frames otherwise
        """
        X_train_scaled = self.fit(X_train).transform(X_train)
        if not frames:
            return X_train_scaled
        return (X_train_scaled,) + tuple(self.transform(f) for f in frames)

    @property
    def stats(self) -> MinMaxStats:
        if not self.fitted:
            raise ValueError("Scaler not fitted")
        return MinMaxStats(
            minimum=pd.Series(self.scaler.data_min_, index=self.columns),
            maximum=pd.Series(self.scaler.data_max_, index=self.columns),
        )

    def _constant_mask(self) -> np.ndarray:
        return self.scaler.data_range_ == 0
