"""Feed-forward neural network classifier (PyTorch).

The network maps the normalized features to a single logit; a sigmoid turns
it into the probability of the malignant class. Training runs mini-batch
gradient descent on ``BCEWithLogitsLoss`` until the epoch loss stops
improving by at least ``threshold`` or ``max_epochs`` is reached.
"""

from typing import Any, Dict, List, Optional

import numpy as np
import torch
import torch.nn as nn
from torch.utils.data import DataLoader, TensorDataset
from loguru import logger

from ..metrics.metrics_wrapper import MetricsWrapper
from .base import (
    EarlyStopping, ModelFactory, ModelTrainer, OptimizerFactory,
    TrainedModel, safe_float, safe_int,
)

ACTIVATIONS = {
    'ReLU': nn.ReLU,
    'LeakyReLU': nn.LeakyReLU,
    'Sigmoid': nn.Sigmoid,
    'Tanh': nn.Tanh,
}


class FeedForwardNet(nn.Module):
    """Fully connected network with one output logit."""

    def __init__(self, input_dim: int, hidden_layers: List[int], activation: str = 'ReLU'):
        super().__init__()

        if activation not in ACTIVATIONS:
            raise ValueError(f"Unknown activation: {activation}. Available: {list(ACTIVATIONS)}")
        if not hidden_layers:
            raise ValueError("At least one hidden layer is required")

        self.input_dim = input_dim
        modules = []
        in_features = input_dim
        for width in hidden_layers:
            modules.append(nn.Linear(in_features, width))
            modules.append(ACTIVATIONS[activation]())
            in_features = width
        modules.append(nn.Linear(in_features, 1))

        self.layers = nn.Sequential(*modules)

    def forward(self, x):
        return self.layers(x).view(-1)


class NeuralNetworkModel(TrainedModel):
    """Fitted feed-forward network."""

    def __init__(self, model: FeedForwardNet, config: Optional[Dict[str, Any]] = None,
                 history: Optional[Dict[str, list]] = None):
        super().__init__(model, config)
        self.device = next(model.parameters()).device
        self.history = history or {}

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        self.model.eval()
        with torch.no_grad():
            logits = self.model(torch.as_tensor(np.asarray(X), dtype=torch.float32, device=self.device))
            probas = torch.sigmoid(logits)
        return probas.cpu().numpy().astype(float)


class NeuralNetworkTrainer(ModelTrainer):
    """
    Trains a :class:`FeedForwardNet`.

    Hyperparameters:
        hidden_layers: Ordered hidden-layer widths
        activation: Hidden activation name
        optimizer: Optimizer name or config dict
        learning_rate: Initial learning rate
        batch_size: Mini-batch size
        max_epochs: Upper bound on training epochs
        threshold: Minimum loss reduction counted as progress
        patience: Epochs without progress before stopping
        random_state: Seed for weight init and batch shuffling
        device: 'cpu' or 'cuda'
        log_interval: Epochs between debug progress lines
    """

    defaults = {
        'hidden_layers': [16, 8],
        'activation': 'ReLU',
        'optimizer': 'Adam',
        'learning_rate': 0.01,
        'batch_size': 32,
        'max_epochs': 1000,
        'threshold': 1e-4,
        'patience': 10,
        'random_state': 42,
        'log_interval': 50,
    }

    def _fit(self, X: np.ndarray, y: np.ndarray, params: Dict[str, Any]) -> NeuralNetworkModel:
        max_epochs = safe_int(params.get('max_epochs'), 1000)
        batch_size = safe_int(params.get('batch_size'), 32)
        learning_rate = safe_float(params.get('learning_rate'), 0.01)
        seed = safe_int(params.get('random_state'), 42)
        hidden_layers = params.get('hidden_layers')
        hidden_layers = [16, 8] if hidden_layers is None else [safe_int(w, 8) for w in hidden_layers]
        input_dim = safe_int(params.get('input_dim'), X.shape[1])
        if input_dim != X.shape[1]:
            raise ValueError(f"input_dim={input_dim} but data has {X.shape[1]} features")

        device = torch.device(params.get('device') or ('cuda' if torch.cuda.is_available() else 'cpu'))

        torch.manual_seed(seed)
        net = FeedForwardNet(input_dim, hidden_layers, params.get('activation', 'ReLU')).to(device)
        criterion = nn.BCEWithLogitsLoss()
        optimizer = OptimizerFactory.create_optimizer(params.get('optimizer', 'Adam'), net.parameters(), learning_rate)
        logger.info(f"Network: {input_dim} -> {hidden_layers} -> 1, optimizer {optimizer.__class__.__name__}, lr {learning_rate}")

        # Reproducible shuffling
        generator = torch.Generator()
        generator.manual_seed(seed)
        train_loader = DataLoader(
            TensorDataset(torch.tensor(X, dtype=torch.float32), torch.tensor(y, dtype=torch.float32)),
            batch_size=batch_size,
            shuffle=True,
            generator=generator,
        )

        early_stopping = EarlyStopping(
            patience=safe_int(params.get('patience'), 10),
            min_delta=safe_float(params.get('threshold'), 1e-4),
        )
        history = {'train_loss': [], 'train_accuracy': [], 'epochs': []}
        log_interval = max(1, safe_int(params.get('log_interval'), 50))

        net.train()
        for epoch in range(1, max_epochs + 1):
            epoch_metrics = self._train_epoch(net, train_loader, criterion, optimizer, device)
            history['train_loss'].append(epoch_metrics['loss'])
            history['train_accuracy'].append(epoch_metrics['accuracy'])
            history['epochs'].append(epoch)

            if epoch % log_interval == 0:
                logger.debug(f"Epoch {epoch}/{max_epochs} | Train Loss: {epoch_metrics['loss']:.6f} | "
                             f"Train Accuracy: {epoch_metrics['accuracy']:.4f}")

            if early_stopping(net, epoch_metrics['loss'], epoch):
                logger.info(f"Converged at epoch {epoch}: loss improved by less than "
                            f"{early_stopping.min_delta} for {early_stopping.patience} epochs")
                break
        else:
            logger.info(f"Stopped after max_epochs={max_epochs}")

        early_stopping.restore(net)
        net.eval()
        logger.info("Training completed")
        return NeuralNetworkModel(net, config=params, history=history)

    @staticmethod
    def _train_epoch(net: nn.Module, train_loader: DataLoader, criterion: nn.Module,
                     optimizer: torch.optim.Optimizer, device: torch.device) -> Dict[str, float]:
        """Run one pass over the training batches and return mean loss and accuracy."""
        epoch_loss = 0.0
        all_preds = []
        all_targets = []

        for batch_X, batch_y in train_loader:
            batch_X = batch_X.to(device)
            batch_y = batch_y.to(device)

            optimizer.zero_grad()
            outputs = net(batch_X)
            loss = criterion(outputs, batch_y)
            loss.backward()
            optimizer.step()

            epoch_loss += loss.item() * len(batch_y)
            all_preds.extend((outputs.detach() > 0).long().cpu().numpy())
            all_targets.extend(batch_y.long().cpu().numpy())

        avg_loss = epoch_loss / len(train_loader.dataset)
        accuracy = MetricsWrapper.get_eval_metrics('accuracy', y_true=np.array(all_targets), y_pred=np.array(all_preds))
        return {'loss': avg_loss, 'accuracy': accuracy}


ModelFactory.register_trainer('neural_network', NeuralNetworkTrainer)
