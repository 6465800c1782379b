"""Data handling module."""

from .dataset import CLASS_ORDER, Dataset, Diagnosis, MinMaxStats, Record, Schema, WDBC_SCHEMA
from .loader import DataLoader, WDBC_URL
from .preprocessor import DataPreprocessor
from .feature_scaler import FeatureScaler
from .splitter import Partition, StratifiedSplitter

__all__ = [
    "CLASS_ORDER",
    "Dataset",
    "Diagnosis",
    "MinMaxStats",
    "Record",
    "Schema",
    "WDBC_SCHEMA",
    "DataLoader",
    "WDBC_URL",
    "DataPreprocessor",
    "FeatureScaler",
    "Partition",
    "StratifiedSplitter",
]
