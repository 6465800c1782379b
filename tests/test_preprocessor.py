import numpy as np
import pandas as pd
import pytest

from wdbc.data import DataPreprocessor, FeatureScaler
from wdbc.data.dataset import Dataset, LABEL_DTYPE
from wdbc.exceptions import InsufficientClasses, SchemaMismatch


def raw(features, labels):
    features = np.asarray(features, dtype=float)
    return Dataset(
        features=pd.DataFrame(features, columns=[f"f{i}" for i in range(features.shape[1])]),
        labels=pd.Series(labels),
        identifiers=pd.Series([str(i) for i in range(len(labels))]),
    )


def test_prepare_drops_identifiers_and_casts_labels(raw_dataset):
    prepared = DataPreprocessor().prepare(raw_dataset)
    assert prepared.identifiers is None
    assert prepared.labels.dtype == LABEL_DTYPE
    assert set(prepared.labels) == {'benign', 'malignant'}
    assert prepared.label_counts() == {'benign': 60, 'malignant': 40}
    np.testing.assert_array_equal(prepared.X, raw_dataset.X)


def test_encoded_labels(prepared_dataset):
    y = prepared_dataset.y
    assert set(np.unique(y)) == {0, 1}
    assert y.sum() == 40


def test_custom_label_map():
    data = raw([[1.0], [2.0], [3.0]], ['0', '1', '0'])
    prepared = DataPreprocessor({'label_map': {'0': 'benign', '1': 'malignant'}}).prepare(data)
    assert list(prepared.labels) == ['benign', 'malignant', 'benign']


def test_unknown_label_token_raises_schema_mismatch():
    data = raw([[1.0], [2.0], [3.0]], ['B', 'M', 'X'])
    with pytest.raises(SchemaMismatch, match="'X'") as exc_info:
        DataPreprocessor().prepare(data)
    assert exc_info.value.stage == 'preprocessor'


def test_single_label_raises_insufficient_classes():
    data = raw([[1.0], [2.0], [3.0]], ['B', 'B', 'B'])
    with pytest.raises(InsufficientClasses) as exc_info:
        DataPreprocessor().prepare(data)
    assert exc_info.value.stage == 'preprocessor'


def test_fit_transform_maps_into_unit_interval(raw_dataset):
    normalized = DataPreprocessor().fit_transform(raw_dataset)
    X = normalized.X
    assert X.min() >= 0.0 and X.max() <= 1.0
    # Fitted min and max land exactly on 0 and 1
    assert (X.min(axis=0) == 0.0).all()
    assert (X.max(axis=0) == 1.0).all()
    assert normalized.scaling is not None


def test_constant_column_maps_to_zero():
    train = raw([[5.0, 1.0], [5.0, 3.0], [5.0, 2.0]], ['B', 'M', 'B'])
    test = raw([[7.0, 4.0], [5.0, 0.0]], ['M', 'B'])

    preprocessor = DataPreprocessor()
    prepared_train = preprocessor.prepare(train)
    preprocessor.fit(prepared_train)

    scaled_train = preprocessor.transform(prepared_train).X
    scaled_test = preprocessor.transform(preprocessor.prepare(test)).X
    assert (scaled_train[:, 0] == 0.0).all()
    assert (scaled_test[:, 0] == 0.0).all()
    assert preprocessor.scaler.stats.constant_columns == ('f0',)


def test_transform_uses_fitted_statistics_unchanged():
    train = raw([[0.0], [10.0], [5.0]], ['B', 'M', 'B'])
    test = raw([[20.0], [-5.0]], ['M', 'B'])

    preprocessor = DataPreprocessor()
    preprocessor.fit(preprocessor.prepare(train))
    scaled = preprocessor.transform(preprocessor.prepare(test))

    np.testing.assert_allclose(scaled.X[:, 0], [2.0, -0.5])
    assert scaled.scaling.minimum['f0'] == 0.0
    assert scaled.scaling.maximum['f0'] == 10.0


def test_transform_before_fit_raises(prepared_dataset):
    with pytest.raises(ValueError, match='not fitted'):
        DataPreprocessor().transform(prepared_dataset)


def test_scaler_rejects_different_columns():
    scaler = FeatureScaler().fit(pd.DataFrame({'a': [0.0, 1.0]}))
    with pytest.raises(ValueError, match='Columns differ'):
        scaler.transform(pd.DataFrame({'b': [0.5]}))


def test_scaler_fit_transform_multiple_frames():
    train = pd.DataFrame({'a': [0.0, 4.0]})
    test = pd.DataFrame({'a': [2.0]}, index=[7])
    scaled_train, scaled_test = FeatureScaler().fit_transform(train, test)
    assert list(scaled_train['a']) == [0.0, 1.0]
    assert scaled_test.loc[7, 'a'] == 0.5
