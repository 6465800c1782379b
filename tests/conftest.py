"""Shared fixtures: synthetic WDBC-shaped files and datasets."""

import csv

import numpy as np
import pandas as pd
import pytest

from wdbc.data import DataLoader, DataPreprocessor, StratifiedSplitter
from wdbc.data.dataset import Dataset, LABEL_DTYPE, WDBC_SCHEMA

N_FEATURES = len(WDBC_SCHEMA.feature_columns)

# Small, fast settings; the synthetic classes are separable so these suffice
FAST_NEURAL_NETWORK = {
    'hidden_layers': [16, 8],
    'learning_rate': 0.01,
    'batch_size': 16,
    'max_epochs': 300,
    'threshold': 1e-6,
    'patience': 50,
}
FAST_RANDOM_FOREST = {
    'n_estimators': 50,
    'n_jobs': 1,
}


def make_rows(n_benign=60, n_malignant=40, seed=0):
    """Rows of (id, B/M, 30 features) with every feature separating the classes.

    Benign values lie in [0, 0.4] and malignant values in [0.6, 1.0], each
    column multiplied by its own scale.
    """
    rng = np.random.RandomState(seed)
    scales = np.linspace(1.0, 300.0, N_FEATURES)
    rows = []
    labels = ['B'] * n_benign + ['M'] * n_malignant
    order = rng.permutation(len(labels))
    for i, idx in enumerate(order):
        label = labels[idx]
        low, high = (0.0, 0.4) if label == 'B' else (0.6, 1.0)
        values = rng.uniform(low, high, N_FEATURES) * scales
        rows.append([str(842300 + i), label] + [f"{v:.6f}" for v in values])
    return rows


def make_single_feature_rows(n_benign=50, n_malignant=50, seed=0):
    """Rows where only the first feature separates the classes; the other 29 are constant."""
    rng = np.random.RandomState(seed)
    labels = ['B'] * n_benign + ['M'] * n_malignant
    rows = []
    for i, idx in enumerate(rng.permutation(len(labels))):
        label = labels[idx]
        low, high = (0.0, 0.4) if label == 'B' else (0.6, 1.0)
        values = [rng.uniform(low, high)] + [1.0] * (N_FEATURES - 1)
        rows.append([str(900000 + i), label] + [f"{v:.6f}" for v in values])
    return rows


def write_csv(path, rows):
    with open(path, 'w', newline='') as f:
        csv.writer(f).writerows(rows)
    return path


def make_dataset(features, labels):
    """Dataset with already-cast labels, as the preprocessor would produce."""
    features = np.asarray(features, dtype=float)
    if features.ndim == 1:
        features = features.reshape(-1, 1)
    columns = [f"f{i}" for i in range(features.shape[1])]
    return Dataset(
        features=pd.DataFrame(features, columns=columns),
        labels=pd.Series(labels).astype(LABEL_DTYPE),
    )


@pytest.fixture
def wdbc_rows():
    return make_rows()


@pytest.fixture
def wdbc_csv(tmp_path, wdbc_rows):
    return write_csv(tmp_path / 'wdbc.data', wdbc_rows)


@pytest.fixture
def raw_dataset(wdbc_csv):
    return DataLoader().load(wdbc_csv)


@pytest.fixture
def prepared_dataset(raw_dataset):
    return DataPreprocessor().prepare(raw_dataset)


@pytest.fixture
def partition(prepared_dataset):
    """Normalized train/test partition, statistics fitted on the train side."""
    split = StratifiedSplitter(train_fraction=0.7, random_state=42).split(prepared_dataset)
    preprocessor = DataPreprocessor().fit(split.train)
    return type(split)(
        train=preprocessor.transform(split.train),
        test=preprocessor.transform(split.test),
        train_positions=split.train_positions,
        test_positions=split.test_positions,
    )
