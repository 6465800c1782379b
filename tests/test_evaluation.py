import json

import numpy as np
import pandas as pd
import pytest

from wdbc.data.dataset import Diagnosis
from wdbc.evaluation import Evaluator
from wdbc.metrics import is_undefined
from wdbc.models.base import TrainedModel
from wdbc.report import ComparisonReport

from conftest import make_dataset


class FixedModel(TrainedModel):
    """Returns preset malignancy probabilities."""

    def __init__(self, probabilities):
        super().__init__(model=None)
        self.probabilities = np.asarray(probabilities, dtype=float)

    def predict_proba(self, X):
        return self.probabilities[:len(X)]


LABELS = ['malignant', 'benign', 'malignant', 'benign']
PROBABILITIES = [0.9, 0.2, 0.5, 0.7]


@pytest.fixture
def holdout():
    return make_dataset(np.zeros(4), LABELS)


def test_threshold_is_strict(holdout):
    result = Evaluator(threshold=0.5).evaluate(FixedModel(PROBABILITIES), holdout, model_name='fixed')
    # 0.5 is not above the threshold, so it is predicted benign
    assert list(result.predictions) == [1, 0, 0, 1]
    assert result.confusion.to_list() == [[1, 1], [1, 1]]
    assert result.model_name == 'fixed'
    assert result.n_samples == 4


def test_accuracy_matches_direct_count(holdout):
    result = Evaluator().evaluate(FixedModel(PROBABILITIES), holdout)
    assert result.metrics.accuracy == pytest.approx(np.mean(result.predictions == result.actual))
    assert result.confusion.total == len(holdout)


def test_benign_as_positive_class(holdout):
    result = Evaluator(positive_label='benign').evaluate(FixedModel(PROBABILITIES), holdout)
    # Benign probabilities are 0.1, 0.8, 0.5, 0.3; only 0.8 is above 0.5
    assert list(result.predictions) == [1, 0, 1, 1]
    cm = result.confusion
    assert cm.positive_label is Diagnosis.BENIGN
    assert (cm.tp, cm.fn, cm.fp, cm.tn) == (1, 1, 0, 2)
    assert result.metrics.sensitivity == pytest.approx(0.5)
    assert result.metrics.specificity == pytest.approx(1.0)


def test_extras_include_library_scores(holdout):
    result = Evaluator().evaluate(FixedModel(PROBABILITIES), holdout)
    assert set(result.extras) == {'f1', 'roc_auc'}
    assert 0.0 <= result.extras['roc_auc'] <= 1.0


def test_single_class_test_set_reports_undefined():
    holdout = make_dataset(np.zeros(3), ['benign'] * 3)
    result = Evaluator().evaluate(FixedModel([0.1, 0.2, 0.3]), holdout)
    assert result.metrics.accuracy == 1.0
    assert is_undefined(result.metrics.sensitivity)
    assert is_undefined(result.extras['roc_auc'])


@pytest.mark.parametrize('threshold', [-0.1, 1.5])
def test_threshold_out_of_range(threshold):
    with pytest.raises(ValueError, match='threshold'):
        Evaluator(threshold=threshold)


def test_report_table_and_dict(holdout):
    evaluator = Evaluator()
    results = {
        'fixed': evaluator.evaluate(FixedModel(PROBABILITIES), holdout, model_name='fixed'),
        'perfect': evaluator.evaluate(FixedModel([0.9, 0.1, 0.9, 0.1]), holdout, model_name='perfect'),
    }
    report = ComparisonReport.from_results(results, metadata={'test_size': 4})

    frame = report.to_frame()
    assert list(frame.columns) == ['fixed', 'perfect']
    assert frame.loc['Accuracy', 'perfect'] == 1.0
    assert frame.loc['Kappa', 'perfect'] == pytest.approx(1.0)

    data = report.to_dict()
    assert data['metadata'] == {'test_size': 4}
    assert data['models']['fixed']['confusion_matrix']['counts'] == [[1, 1], [1, 1]]
    json.dumps(data)


def test_report_renders_undefined_metrics():
    holdout = make_dataset(np.zeros(3), ['benign'] * 3)
    result = Evaluator().evaluate(FixedModel([0.1, 0.2, 0.3]), holdout, model_name='rf')
    report = ComparisonReport.from_results({'rf': result})

    assert pd.isna(report.to_frame().loc['Sensitivity', 'rf'])
    assert report.to_dict()['models']['rf']['metrics']['sensitivity'] is None

    text = report.render()
    assert 'rows=actual, columns=predicted' in text
    assert 'undefined' in text
    assert 'actual benign' in text
