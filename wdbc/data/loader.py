"""Data loading for header-less delimited tabular files."""

from pathlib import Path
from typing import Union
from urllib.error import URLError

import numpy as np
import pandas as pd
from loguru import logger

from ..exceptions import SchemaMismatch, SourceUnavailable
from .dataset import Dataset, Schema, WDBC_SCHEMA

WDBC_URL = (
    'https://archive.ics.uci.edu/ml/machine-learning-databases/'
    'breast-cancer-wisconsin/wdbc.data'
)

_REMOTE_PREFIXES = ('http://', 'https://', 'ftp://', 'file://')


class DataLoader:
    """Reads a comma-separated file with an externally supplied schema."""

    def __init__(self, schema: Schema = WDBC_SCHEMA, delimiter: str = ','):
        self.schema = schema
        self.delimiter = delimiter

    def load(self, source: Union[str, Path]) -> Dataset:
        """
        Load a dataset from a local path or a URL.

        Args:
            source: File path or URL of a header-less CSV file

        Returns:
            Dataset with raw label tokens and identifiers still attached

        Raises:
            SourceUnavailable: If the resource cannot be read
            SchemaMismatch: If a row does not have the schema's width or a
                feature value is not numeric
        """
        frame = self._read_frame(source)
        self._check_width(frame, source)

        frame.columns = list(self.schema.columns)
        features = self._numeric_features(frame)

        identifiers = None
        if self.schema.id_column:
            identifiers = frame[self.schema.id_column].astype(str).str.strip()
        labels = frame[self.schema.label_column].astype(str).str.strip()

        logger.info(f"Loaded {len(features)} records with {features.shape[1]} features from {source}")
        return Dataset(features=features, labels=labels, identifiers=identifiers)

    def _read_frame(self, source: Union[str, Path]) -> pd.DataFrame:
        """Read every field as text; typing happens after the width check."""
        location = str(source)
        is_remote = location.startswith(_REMOTE_PREFIXES)
        if not is_remote and not Path(location).is_file():
            raise SourceUnavailable(f"File not found: {location}")

        try:
            return pd.read_csv(
                location,
                header=None,
                sep=self.delimiter,
                dtype=str,
                skip_blank_lines=True,
            )
        except pd.errors.EmptyDataError as e:
            raise SchemaMismatch(f"No rows in {location}") from e
        except pd.errors.ParserError as e:
            raise SchemaMismatch(f"Malformed rows in {location}: {e}") from e
        except UnicodeDecodeError as e:
            raise SchemaMismatch(f"Undecodable bytes in {location}: {e}") from e
        except (URLError, OSError) as e:
            raise SourceUnavailable(f"Cannot read {location}: {e}") from e

    def _check_width(self, frame: pd.DataFrame, source: Union[str, Path]) -> None:
        expected = self.schema.width
        if frame.shape[1] != expected:
            raise SchemaMismatch(
                f"Expected {expected} columns, found {frame.shape[1]} in {source}"
            )

        # Short rows are padded with NaN by the parser
        short = frame.isna().any(axis=1).to_numpy()
        if short.any():
            row = int(np.flatnonzero(short)[0]) + 1
            width = int(frame.iloc[row - 1].notna().sum())
            raise SchemaMismatch(f"Row {row} has {width} fields, expected {expected}")

    def _numeric_features(self, frame: pd.DataFrame) -> pd.DataFrame:
        columns = list(self.schema.feature_columns)
        try:
            features = frame[columns].apply(pd.to_numeric)
        except (ValueError, TypeError) as e:
            raise SchemaMismatch(f"Non-numeric feature value: {e}") from e
        return features.astype(float).reset_index(drop=True)
