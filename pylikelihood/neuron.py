"""
Single sigmoid unit trained by batch gradient descent.

Examples
--------
>>> import numpy as np
>>> from pylikelihood import SigmoidUnit
>>> X = np.array([[0, 0, 1], [1, 1, 1], [1, 0, 1], [0, 1, 1]])
>>> y = np.array([0, 1, 1, 0])
>>> unit = SigmoidUnit(3, rng=np.random.default_rng(1))
>>> result = unit.train(X, y, iterations=1000)
>>> result.final_accuracy
1.0
>>> bool(unit.predict([[1, 0, 0]])[0] > 0.5)
True
"""

import numpy as np
from typing import Optional
from dataclasses import dataclass
from scipy.special import expit

from .exceptions import DimensionMismatch, UntrainedModel
from ._utils import check_array, check_vector


@dataclass(frozen=True)
class TrainResult:
    """Output of one training run."""
    predictions: np.ndarray     # Outputs of the last iteration
    accuracy_trace: np.ndarray  # Accuracy per iteration
    weights: np.ndarray         # Weights after the last update

    @property
    def iterations(self) -> int:
        return self.accuracy_trace.shape[0]

    @property
    def final_accuracy(self) -> float:
        return float(self.accuracy_trace[-1])


def _sigmoid(s: np.ndarray) -> np.ndarray:
    return expit(s)


def _gradient(X: np.ndarray, y: np.ndarray, y_hat: np.ndarray) -> np.ndarray:
    """Squared-error gradient with respect to the weights."""
    error = y_hat - y
    return X.T @ (error * y_hat * (1.0 - y_hat))


def _accuracy(y: np.ndarray, y_hat: np.ndarray) -> float:
    return float(np.mean(np.round(y_hat) == y))


def _frozen(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=np.float64)
    a.flags.writeable = False
    return a


class SigmoidUnit:
    """
    Linear-then-sigmoid unit for binary labels.

    The unit owns its weight vector and accuracy trace; only ``train``
    changes them.
    """

    def __init__(self, n_inputs: int, rng: Optional[np.random.Generator] = None):
        """
        Parameters
        ----------
        n_inputs : int
            Input dimensionality (number of feature columns)
        rng : numpy.random.Generator, optional
            Source for weight initialization; pass a seeded generator
            for reproducible training
        """
        if n_inputs < 1:
            raise ValueError(f"n_inputs must be positive, got {n_inputs}")
        self.n_inputs = int(n_inputs)
        self._rng = rng if rng is not None else np.random.default_rng()
        self._weights: Optional[np.ndarray] = None
        self._accuracy_trace = _frozen(np.empty(0))

    @property
    def is_trained(self) -> bool:
        return self._weights is not None

    @property
    def weights(self) -> np.ndarray:
        if self._weights is None:
            raise UntrainedModel(type(self).__name__)
        return _frozen(self._weights)

    @property
    def accuracy_trace(self) -> np.ndarray:
        return self._accuracy_trace

    def train(
        self,
        X,
        y,
        iterations: int,
        learning_rate: float = 1.0,
        tol: Optional[float] = None,
    ) -> TrainResult:
        """
        Fit the unit with batch gradient descent.

        Parameters
        ----------
        X : array_like, shape (n, n_inputs)
            Feature matrix
        y : array_like, shape (n,)
            Binary labels (0 or 1)
        iterations : int
            Number of gradient steps
        learning_rate : float, default=1.0
            Step size
        tol : float, optional
            Stop early once every gradient component is below ``tol``.
            By default exactly ``iterations`` steps are taken.

        Returns
        -------
        result : TrainResult
            Last-iteration outputs, accuracy trace and final weights
        """
        X = self._check_features(X)
        y = check_vector(y, name='y')
        if y.shape[0] != X.shape[0]:
            raise DimensionMismatch(
                f"X has {X.shape[0]} rows but y has {y.shape[0]} labels"
            )
        if not np.all((y == 0) | (y == 1)):
            raise ValueError("y must contain only 0/1 labels")
        if iterations < 1:
            raise ValueError(f"iterations must be at least 1, got {iterations}")
        if not learning_rate > 0:
            raise ValueError(f"learning_rate must be positive, got {learning_rate}")

        weights = self._rng.uniform(-1.0, 1.0, self.n_inputs)
        trace = []
        y_hat = None
        for _ in range(iterations):
            y_hat = _sigmoid(X @ weights)
            grad = _gradient(X, y, y_hat)
            weights = weights - learning_rate * grad
            trace.append(_accuracy(y, y_hat))
            if tol is not None and np.max(np.abs(grad)) < tol:
                break

        self._weights = weights
        self._accuracy_trace = _frozen(trace)
        return TrainResult(
            predictions=_frozen(y_hat),
            accuracy_trace=self._accuracy_trace,
            weights=_frozen(weights),
        )

    def predict(self, X) -> np.ndarray:
        """
        Outputs of the unit for ``X`` with the current weights.

        Raises
        ------
        UntrainedModel
            If ``train`` has not been called
        """
        if self._weights is None:
            raise UntrainedModel(type(self).__name__)
        X = self._check_features(X)
        return _sigmoid(X @ self._weights)

    def _check_features(self, X) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        X = check_array(X, name='X')
        if X.shape[1] != self.n_inputs:
            raise DimensionMismatch(
                f"X has {X.shape[1]} columns, expected {self.n_inputs}"
            )
        return X

    def __repr__(self):
        state = "trained" if self.is_trained else "untrained"
        return f"SigmoidUnit(n_inputs={self.n_inputs}, {state})"


__all__ = ["SigmoidUnit", "TrainResult"]
