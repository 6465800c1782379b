import warnings

import numpy as np
import pytest
import torch

from wdbc.data.dataset import Diagnosis
from wdbc.exceptions import InsufficientClasses
from wdbc.models import (
    EarlyStopping, FeedForwardNet, ModelFactory, NeuralNetworkModel,
    NeuralNetworkTrainer, OptimizerFactory, Prediction, RandomForestModel,
    RandomForestTrainer,
)
from wdbc.utils import ModelAnalyzer

from conftest import FAST_NEURAL_NETWORK, FAST_RANDOM_FOREST, make_dataset


def accuracy(model, dataset):
    return np.mean(model.predict(dataset.X) == dataset.y)


def test_factory_lists_both_models():
    assert {'neural_network', 'random_forest'} <= set(ModelFactory.list_models())
    assert isinstance(ModelFactory.create_trainer('random_forest'), RandomForestTrainer)


def test_factory_unknown_model():
    with pytest.raises(ValueError, match='Unknown model'):
        ModelFactory.create_trainer('svm')


def test_factory_merges_kwargs_into_config():
    trainer = ModelFactory.create_trainer('neural_network', config={'batch_size': 8}, max_epochs=5)
    assert trainer.config['batch_size'] == 8
    assert trainer.config['max_epochs'] == 5
    assert trainer.config['patience'] == NeuralNetworkTrainer.defaults['patience']


def test_neural_network_separates_classes(partition):
    model = NeuralNetworkTrainer(FAST_NEURAL_NETWORK).fit(partition.train)
    assert isinstance(model, NeuralNetworkModel)

    proba = model.predict_proba(partition.test.X)
    assert proba.shape == (len(partition.test),)
    assert ((proba >= 0) & (proba <= 1)).all()
    assert accuracy(model, partition.test) == 1.0


def test_neural_network_is_reproducible(partition):
    first = NeuralNetworkTrainer(FAST_NEURAL_NETWORK).fit(partition.train)
    second = NeuralNetworkTrainer(FAST_NEURAL_NETWORK).fit(partition.train)
    np.testing.assert_allclose(first.predict_proba(partition.test.X),
                               second.predict_proba(partition.test.X))


def test_neural_network_stops_when_loss_stalls(partition):
    params = {**FAST_NEURAL_NETWORK, 'threshold': 1.0, 'patience': 2}
    model = NeuralNetworkTrainer(params).fit(partition.train)
    # The first epoch sets the baseline, the next two fail to improve by 1.0
    assert model.history['epochs'] == [1, 2, 3]


def test_neural_network_respects_max_epochs(partition):
    params = {**FAST_NEURAL_NETWORK, 'max_epochs': 4, 'threshold': 0.0, 'patience': 100}
    model = NeuralNetworkTrainer(params).fit(partition.train)
    assert len(model.history['train_loss']) == 4


def test_neural_network_hyperparameter_override(partition):
    trainer = NeuralNetworkTrainer(FAST_NEURAL_NETWORK)
    model = trainer.fit(partition.train, hyperparameters={'hidden_layers': [4], 'max_epochs': 2})
    assert model.config['hidden_layers'] == [4]
    assert ModelAnalyzer.count_parameters(model) == 30 * 4 + 4 + 4 + 1


def test_random_forest_separates_classes(partition):
    model = RandomForestTrainer(FAST_RANDOM_FOREST).fit(partition.train)
    assert isinstance(model, RandomForestModel)
    assert accuracy(model, partition.test) == 1.0


def test_random_forest_probability_is_vote_fraction(partition):
    model = RandomForestTrainer(FAST_RANDOM_FOREST).fit(partition.train)
    votes = model.tree_votes(partition.test.X)
    assert votes.shape == (50, len(partition.test))
    proba = model.predict_proba(partition.test.X)
    np.testing.assert_allclose(proba * 50, np.round(proba * 50))
    np.testing.assert_allclose(proba, votes.mean(axis=0))


def test_random_forest_ignores_unknown_params(partition):
    model = RandomForestTrainer({**FAST_RANDOM_FOREST, 'log_interval': 10}).fit(partition.train)
    assert model.model.n_estimators == 50


def test_predict_record(partition):
    model = RandomForestTrainer(FAST_RANDOM_FOREST).fit(partition.train)
    record = next(partition.test.records())
    prediction = model.predict_record(record)
    assert isinstance(prediction, Prediction)
    assert prediction.label == record.label
    assert prediction.label is Diagnosis.from_code(int(prediction.probability > 0.5))


def test_trainer_requires_two_classes():
    train = make_dataset(np.random.RandomState(0).rand(10, 3), ['malignant'] * 10)
    with pytest.raises(InsufficientClasses) as exc_info:
        RandomForestTrainer(FAST_RANDOM_FOREST).fit(train)
    assert exc_info.value.stage == 'trainer'


def test_feed_forward_parameter_count():
    net = FeedForwardNet(30, [16, 8])
    assert ModelAnalyzer.count_parameters(net) == (30 * 16 + 16) + (16 * 8 + 8) + (8 + 1)
    assert net(torch.zeros(3, 30)).shape == (3,)


def test_feed_forward_rejects_unknown_activation():
    with pytest.raises(ValueError, match='Unknown activation'):
        FeedForwardNet(30, [8], activation='Swish')


def test_optimizer_factory_unknown_optimizer():
    net = FeedForwardNet(4, [2])
    with pytest.raises(ValueError, match='Unknown optimizer'):
        OptimizerFactory.create_optimizer('Adagrad', net.parameters(), 0.01)


def test_early_stopping_restores_best_weights():
    net = FeedForwardNet(4, [2])
    stopper = EarlyStopping(patience=2, min_delta=0.1)
    assert not stopper(net, 1.0, epoch=1)
    best = {k: v.clone() for k, v in net.state_dict().items()}

    for p in net.parameters():
        p.data.add_(1.0)
    assert not stopper(net, 1.05, epoch=2)
    assert stopper(net, 1.02, epoch=3)

    stopper.restore(net)
    for key, value in net.state_dict().items():
        assert (value == best[key]).all()
    assert stopper.best_epoch == 1


def test_empty_hidden_layers_is_rejected(partition):
    with pytest.raises(ValueError, match='At least one hidden layer'):
        NeuralNetworkTrainer({**FAST_NEURAL_NETWORK, 'hidden_layers': []}).fit(partition.train)


def test_training_on_read_only_arrays_does_not_warn(partition):
    X = partition.train.X
    X.setflags(write=False)
    with warnings.catch_warnings():
        warnings.filterwarnings('error', message='.*non-writable.*')
        trainer = NeuralNetworkTrainer({**FAST_NEURAL_NETWORK, 'max_epochs': 1})
        trainer._fit(X, partition.train.y, trainer.config)
