"""Online Bayesian logistic regression trained by EP/ADF message passing.

Each feature weight w_i carries a Gaussian belief. For one example the
factor graph is

    w_1 ... w_n  ->  s = sum_i x_i w_i  ->  t = s + noise(beta)  ->  label

and one training step is a single forward/backward sweep over it:

  1. Forward: aggregate the active weights into a score belief s.
  2. Correct: add observation noise, truncate at zero on the label's side,
     and send the corrected score back down to s.
  3. Backward: for each active feature, isolate its share of the change in
     s, fold it into w_i, decay w_i toward the prior and floor its variance.

Prediction runs the forward step only and returns Phi(mean / stddev) of
the noisy score.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Mapping, Sequence

import numpy as np

from .config import ModelConfiguration, parse_params
from .errors import NumericalError
from .gaussian import GaussianBelief, norm_cdf, product, truncated_correction
from .store import PathLike, WeightPosteriorStore
from .types import Example, FeatureActivation

logger = logging.getLogger(__name__)

# Dynamics: each update keeps 0.99 of the belief and reverts 0.01 toward the prior.
DECAY_RETAIN = 0.99
DECAY_REVERT = 0.01
VARIANCE_FLOOR_FRACTION = 0.01


# ---------------------------------------------------------------------------
# EP stages
# ---------------------------------------------------------------------------


def forward_aggregate(
    beliefs: Mapping[int, GaussianBelief] | WeightPosteriorStore,
    features: Sequence[FeatureActivation],
) -> GaussianBelief:
    """Belief over the linear score sum_i value_i * w_i.

    Zero-valued activations are skipped. ``beliefs`` must answer ``get``
    for every active id (the store answers unseen ids with the prior).
    """
    mean = 0.0
    vari = 0.0
    for feature in features:
        if feature.value == 0.0:
            continue
        wi = beliefs.get(feature.id)
        mean += feature.value * wi.mean
        vari += feature.value * feature.value * wi.variance
    return GaussianBelief(mean, vari)


def correct_label(
    s0: GaussianBelief, beta: float, label: float
) -> tuple[GaussianBelief, GaussianBelief]:
    """Incorporate the observed label into the score belief.

    Returns ``(s0, s)``: the untouched forward aggregate and the new
    posterior aggregate used by the backward step.
    """
    t = s0.with_added_variance(beta)
    sign = 1 if label > 0.0 else -1
    t = product(t, truncated_correction(t, sign))
    s2 = t.with_added_variance(beta)
    return s0, product(s0, s2)


def backward_update(
    wi: GaussianBelief,
    value: float,
    s0: GaussianBelief,
    s: GaussianBelief,
    init_var: float,
) -> GaussianBelief:
    """Updated belief for one active feature (``value != 0``)."""
    value2 = value * value
    message = GaussianBelief(
        mean=(s.mean - (s0.mean - wi.mean * value)) / value,
        variance=(s.variance + (s0.variance - wi.variance * value2)) / value2,
    )
    updated = product(wi, message)

    # The mean term divides by the pre-decay variance and scales by the
    # post-decay one.
    vari_old = updated.variance
    vari_new = vari_old * init_var / (DECAY_RETAIN * init_var + DECAY_REVERT * vari_old)
    prior_mean = 0.0
    mean_new = vari_new * (
        DECAY_RETAIN * updated.mean / vari_old + DECAY_REVERT * prior_mean / vari_new
    )

    floor = init_var * VARIANCE_FLOOR_FRACTION
    if vari_new < floor:
        vari_new = floor
    return GaussianBelief(mean_new, vari_new)


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class EPLogisticRegression:
    """Bayesian logistic regression over sparse features (AdPredictor style).

    Architecture:
      1. Weight posteriors live in a ``WeightPosteriorStore``
      2. ``train_example`` runs forward / correct / backward for one example
         and commits all touched beliefs at once
      3. ``predict`` is read-only and never inserts unseen ids
    """

    def __init__(self, config: ModelConfiguration) -> None:
        self.config = config
        self.store = WeightPosteriorStore(init_var=config.init_var)
        self.n_trained = 0

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> EPLogisticRegression:
        """Create a model from a string parameter map, e.g. ``{"beta": "0.1"}``."""
        return cls(parse_params(params))

    def init(self, params: Mapping[str, str]) -> None:
        """Re-initialize with new parameters and an empty store."""
        self.config = parse_params(params)
        self.store = WeightPosteriorStore(init_var=self.config.init_var)
        self.n_trained = 0

    def clear(self) -> None:
        """Forget all learned beliefs; configuration is kept."""
        self.store.clear()
        self.n_trained = 0

    @property
    def prior(self) -> GaussianBelief:
        return GaussianBelief(0.0, self.config.init_var)

    def posterior(self, feature_id: int) -> GaussianBelief:
        return self.store.get(feature_id)

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train_example(self, example: Example) -> None:
        """Run one EP update for ``example``.

        Either every touched feature is updated or none is.

        Raises:
            NumericalError: If the update produced a degenerate belief.
                The store is left unchanged.
        """
        features = example.active_features()
        if not features:
            return

        # Unseen ids start from the prior and are inserted on commit.
        staged: dict[int, GaussianBelief] = {}
        for f in features:
            if f.id not in staged:
                staged[f.id] = self.store.get(f.id)

        s0 = forward_aggregate(staged, features)
        s0, s = correct_label(s0, self.config.beta, example.label)

        for f in features:
            staged[f.id] = backward_update(
                staged[f.id], f.value, s0, s, self.config.init_var
            )

        bad = [fid for fid, g in staged.items() if not g.is_valid]
        if bad:
            raise NumericalError(
                f"degenerate posterior for feature(s) {bad[:5]} "
                f"(s0={s0}, s={s}); example rejected"
            )

        self.store.update(staged)
        self.n_trained += 1
        logger.debug(
            "Trained example label=%s features=%d s0=(%.4f, %.4f) s=(%.4f, %.4f)",
            example.label, len(features), s0.mean, s0.variance, s.mean, s.variance,
        )

    def train(self, dataset: Iterable[Example]) -> int:
        """Train on examples in order. Returns count processed."""
        count = 0
        for example in dataset:
            try:
                self.train_example(example)
            except NumericalError:
                logger.warning("Rejected example %d (label=%s)", count, example.label)
                raise
            count += 1
        logger.info(
            "Trained on %d examples: %d features known", count, len(self.store)
        )
        return count

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def score(self, example: Example) -> GaussianBelief:
        """Belief over the noisy linear score t = s + noise(beta)."""
        s = forward_aggregate(self.store, example.features)
        return s.with_added_variance(self.config.beta)

    def predict(self, example: Example) -> float:
        """Probability that ``example`` is positive."""
        t = self.score(example)
        if t.variance == 0.0:
            # beta == 0 and no active features: score is exactly 0
            return 0.5 if t.mean == 0.0 else float(t.mean > 0.0)
        return norm_cdf(t.mean / math.sqrt(t.variance))

    def predict_batch(self, examples: Iterable[Example]) -> np.ndarray:
        return np.array([self.predict(e) for e in examples], dtype=np.float64)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_model(self, path: PathLike) -> int:
        return self.store.save(path)

    def load_model(self, path: PathLike) -> int:
        count = self.store.load(path)
        logger.info("Model ready: beta=%.4f, %d features", self.config.beta, count)
        return count
