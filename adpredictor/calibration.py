"""Calibration tracking: Brier score, log loss, AUC, reliability curve.

Accumulates (predicted_prob, label) pairs, typically from progressive
validation (predict an example, then train on it), and summarizes how
well the predicted probabilities match observed outcomes.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

import numpy as np
from sklearn.metrics import log_loss, roc_auc_score

logger = logging.getLogger(__name__)

PROB_EPS = 1e-15


@dataclass
class PredictionRecord:
    """Stores a single prediction for calibration tracking."""

    predicted_prob: float
    outcome: float                   # 1.0 positive, 0.0 negative


class CalibrationTracker:
    """Tracks calibration quality of model predictions.

    Keeps the most recent ``buffer_size`` records.
    """

    def __init__(self, buffer_size: int = 100_000) -> None:
        self._buffer: deque[PredictionRecord] = deque(maxlen=buffer_size)

    def record(self, predicted_prob: float, label: float) -> None:
        """Record a prediction and the label it was scored against."""
        self._buffer.append(PredictionRecord(
            predicted_prob=float(predicted_prob),
            outcome=1.0 if label > 0.0 else 0.0,
        ))

    def __len__(self) -> int:
        return len(self._buffer)

    def _arrays(self) -> tuple[np.ndarray, np.ndarray]:
        probs = np.fromiter((r.predicted_prob for r in self._buffer), dtype=np.float64)
        outcomes = np.fromiter((r.outcome for r in self._buffer), dtype=np.float64)
        return probs, outcomes

    def brier_score(self) -> Optional[float]:
        """Mean squared error of the probabilities. Lower is better."""
        if not self._buffer:
            return None
        probs, outcomes = self._arrays()
        return float(np.mean((probs - outcomes) ** 2))

    def log_loss(self) -> Optional[float]:
        if not self._buffer:
            return None
        probs, outcomes = self._arrays()
        probs = np.clip(probs, PROB_EPS, 1.0 - PROB_EPS)
        return float(log_loss(outcomes, probs, labels=[0.0, 1.0]))

    def auc(self) -> Optional[float]:
        """ROC AUC; None unless both classes have been seen."""
        if not self._buffer:
            return None
        probs, outcomes = self._arrays()
        if len(np.unique(outcomes)) < 2:
            return None
        return float(roc_auc_score(outcomes, probs))

    def positive_rate(self) -> Optional[float]:
        if not self._buffer:
            return None
        _, outcomes = self._arrays()
        return float(outcomes.mean())

    def calibration_curve(self, n_bins: int = 10) -> dict[str, list]:
        """Binned calibration curve: predicted vs actual by probability bin."""
        if not self._buffer:
            return {"bin_centers": [], "mean_predicted": [], "mean_actual": [], "counts": []}

        probs, outcomes = self._arrays()
        bin_idx = np.minimum((probs * n_bins).astype(int), n_bins - 1)

        centers, predicted, actual, counts = [], [], [], []
        for i in range(n_bins):
            mask = bin_idx == i
            n = int(mask.sum())
            if n:
                centers.append((i + 0.5) / n_bins)
                predicted.append(float(probs[mask].mean()))
                actual.append(float(outcomes[mask].mean()))
                counts.append(n)

        return {
            "bin_centers": centers,
            "mean_predicted": predicted,
            "mean_actual": actual,
            "counts": counts,
        }

    def summary(self) -> dict:
        return {
            "n": len(self._buffer),
            "positive_rate": self.positive_rate(),
            "brier": self.brier_score(),
            "log_loss": self.log_loss(),
            "auc": self.auc(),
            "calibration": self.calibration_curve(),
        }
