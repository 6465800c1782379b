"""Core data types: column schema, diagnosis labels, records and datasets."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


class Diagnosis(str, Enum):
    """The two diagnostic classes."""
    BENIGN = 'benign'
    MALIGNANT = 'malignant'

    @property
    def code(self) -> int:
        """Integer encoding used by the models (malignant = 1)."""
        return 1 if self is Diagnosis.MALIGNANT else 0

    @classmethod
    def from_code(cls, code: int) -> 'Diagnosis':
        return cls.MALIGNANT if int(code) == 1 else cls.BENIGN


CLASS_ORDER: Tuple[Diagnosis, Diagnosis] = (Diagnosis.BENIGN, Diagnosis.MALIGNANT)
LABEL_DTYPE = pd.CategoricalDtype([d.value for d in CLASS_ORDER])

_MEASURES = (
    'radius', 'texture', 'perimeter', 'area', 'smoothness',
    'compactness', 'concavity', 'concave_points', 'symmetry', 'fractal_dimension',
)
_STATISTICS = ('mean', 'se', 'worst')


@dataclass(frozen=True)
class Schema:
    """Column layout of a header-less input file."""
    id_column: Optional[str]
    label_column: str
    feature_columns: Tuple[str, ...]

    @property
    def columns(self) -> Tuple[str, ...]:
        """All columns in file order: identifier, label, features."""
        head = (self.id_column,) if self.id_column else ()
        return head + (self.label_column,) + self.feature_columns

    @property
    def width(self) -> int:
        return len(self.columns)


WDBC_SCHEMA = Schema(
    id_column='id',
    label_column='diagnosis',
    feature_columns=tuple(f"{m}_{s}" for s in _STATISTICS for m in _MEASURES),
)


@dataclass(frozen=True)
class Record:
    """One sample: ordered feature values plus an optional label."""
    features: Tuple[float, ...]
    label: Optional[Diagnosis] = None
    identifier: Optional[str] = None

    def as_array(self) -> np.ndarray:
        return np.asarray(self.features, dtype=float).reshape(1, -1)


@dataclass(frozen=True, eq=False)
class MinMaxStats:
    """Per-column minimum and maximum used for min-max normalization."""
    minimum: pd.Series
    maximum: pd.Series

    @property
    def constant_columns(self) -> Tuple[str, ...]:
        return tuple(self.minimum.index[(self.maximum - self.minimum) == 0])


@dataclass(frozen=True, eq=False)
class Dataset:
    """Ordered records held column-wise.

    ``labels`` holds raw tokens straight out of the loader and a series of
    dtype ``LABEL_DTYPE`` (benign/malignant) once the preprocessor has run.
    ``scaling`` is set when the features have been normalized and records the
    statistics that were used.
    """
    features: pd.DataFrame
    labels: pd.Series
    identifiers: Optional[pd.Series] = None
    scaling: Optional[MinMaxStats] = None

    def __post_init__(self):
        if len(self.features) != len(self.labels):
            raise ValueError("features and labels must have the same length")

    def __len__(self) -> int:
        return len(self.features)

    @property
    def feature_names(self) -> Tuple[str, ...]:
        return tuple(self.features.columns)

    @property
    def n_features(self) -> int:
        return self.features.shape[1]

    @property
    def X(self) -> np.ndarray:
        return self.features.to_numpy(dtype=float)

    @property
    def y(self) -> np.ndarray:
        """Labels encoded as integers (benign = 0, malignant = 1)."""
        mapped = self.labels.astype(object).map({d.value: d.code for d in Diagnosis})
        if mapped.isna().any():
            raise ValueError("labels are not diagnoses; run the preprocessor first")
        return mapped.to_numpy(dtype=int)

    def label_counts(self) -> Dict[str, int]:
        counts = self.labels.astype(object).value_counts()
        return {str(k): int(v) for k, v in sorted(counts.items(), key=lambda kv: str(kv[0]))}

    def subset(self, positions: Sequence[int]) -> 'Dataset':
        """Rows at the given integer positions, in that order."""
        positions = np.asarray(positions, dtype=int)
        return replace(
            self,
            features=self.features.iloc[positions],
            labels=self.labels.iloc[positions],
            identifiers=None if self.identifiers is None else self.identifiers.iloc[positions],
        )

    def records(self) -> Iterator[Record]:
        known = {d.value: d for d in Diagnosis}
        ids = self.identifiers if self.identifiers is not None else [None] * len(self)
        for values, label, ident in zip(self.features.itertuples(index=False), self.labels, ids):
            yield Record(
                features=tuple(float(v) for v in values),
                label=known.get(label),
                identifier=None if ident is None else str(ident),
            )
