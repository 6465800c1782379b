"""Stratified train/test partitioning."""

from dataclasses import dataclass

import numpy as np
from loguru import logger
from sklearn.model_selection import train_test_split

from ..exceptions import InvalidFraction
from .dataset import Dataset
from .preprocessor import check_classes


@dataclass(frozen=True, eq=False)
class Partition:
    """Disjoint, exhaustive (train, test) pair with the source positions of each side."""
    train: Dataset
    test: Dataset
    train_positions: np.ndarray
    test_positions: np.ndarray

    def __len__(self) -> int:
        return len(self.train) + len(self.test)


class StratifiedSplitter:
    """Splits a dataset so each side keeps the source label ratio."""

    def __init__(self, train_fraction: float = 0.7, random_state: int = 42):
        if not isinstance(train_fraction, (int, float)) or not 0.0 < train_fraction < 1.0:
            raise InvalidFraction(f"Train fraction must be in (0, 1), got {train_fraction!r}")
        self.train_fraction = float(train_fraction)
        self.random_state = random_state

    def split(self, dataset: Dataset) -> Partition:
        """
        Partition ``dataset`` into train and test sides.

        Label counts on each side match the source distribution within one
        unit of rounding. The same seed and input always give the same
        partition.

        Raises:
            InsufficientClasses: If fewer than two labels are present
            InvalidFraction: If the fraction leaves either side empty
        """
        check_classes(dataset.labels, stage='splitter')

        positions = np.arange(len(dataset))
        labels = dataset.labels.astype(str).to_numpy()
        try:
            train_pos, test_pos = train_test_split(
                positions,
                train_size=self.train_fraction,
                random_state=self.random_state,
                shuffle=True,
                stratify=labels,
            )
        except ValueError as e:
            # Classes with a single member, or sides smaller than the class count
            logger.debug(f"Stratified split rejected ({e}), splitting each class separately")
            train_pos, test_pos = self._split_per_class(labels)

        if len(train_pos) == 0 or len(test_pos) == 0:
            raise InvalidFraction(
                f"Train fraction {self.train_fraction} leaves a side of the "
                f"{len(dataset)}-record split empty"
            )

        train_pos = np.sort(train_pos)
        test_pos = np.sort(test_pos)
        partition = Partition(
            train=dataset.subset(train_pos),
            test=dataset.subset(test_pos),
            train_positions=train_pos,
            test_positions=test_pos,
        )

        logger.info(f"Data split: train {len(partition.train)} ({len(partition.train) / len(dataset):.1%}), "
                    f"test {len(partition.test)} ({len(partition.test) / len(dataset):.1%})")
        for name, side in [('Train', partition.train), ('Test', partition.test)]:
            logger.info(f"  {name} classes: {side.label_counts()}")
        return partition

    def _split_per_class(self, labels: np.ndarray):
        """Seeded shuffle of each class, rounding its train share to the nearest record."""
        rng = np.random.RandomState(self.random_state)
        train_pos, test_pos = [], []
        for label in sorted(set(labels)):
            members = rng.permutation(np.flatnonzero(labels == label))
            n_train = int(round(self.train_fraction * len(members)))
            train_pos.extend(members[:n_train])
            test_pos.extend(members[n_train:])
        return np.asarray(train_pos, dtype=int), np.asarray(test_pos, dtype=int)
