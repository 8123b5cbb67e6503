"""Gaussian beliefs and the message algebra used by the EP updates.

A belief is a univariate Gaussian kept in (mean, variance) form. Two
operations matter:

  * ``product`` combines two independent messages about the same scalar
    (information-form addition).
  * ``truncated_correction`` produces the message that, multiplied into a
    score belief, moment-matches that belief truncated to one side of zero.
    This is how a binary click/no-click observation enters the model.

A variance of ``math.inf`` is the uninformative message (zero precision).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from scipy.special import log_ndtr, ndtr

from .errors import NumericalError

LOG_SQRT_2PI = 0.5 * math.log(2.0 * math.pi)

# Below this standardized score Phi(z) is far into the tail and the
# inverse Mills ratio is taken from its asymptotic series.
ASYMPTOTIC_Z = -30.0

# w(z) lives in [0, 1); keep 1 - w representable.
W_MAX = 1.0 - 1e-12


@dataclass(frozen=True)
class GaussianBelief:
    """Normal distribution N(mean, variance) over a scalar."""

    mean: float = 0.0
    variance: float = 1.0

    @property
    def precision(self) -> float:
        return 1.0 / self.variance

    @property
    def precision_mean(self) -> float:
        if math.isinf(self.variance):
            return 0.0
        return self.mean / self.variance

    @property
    def stddev(self) -> float:
        return math.sqrt(self.variance)

    @property
    def is_uninformative(self) -> bool:
        return math.isinf(self.variance)

    @property
    def is_valid(self) -> bool:
        return (
            math.isfinite(self.mean)
            and math.isfinite(self.variance)
            and self.variance > 0.0
        )

    @classmethod
    def from_precision(cls, precision: float, precision_mean: float) -> GaussianBelief:
        """Build a belief from information form (1/var, mean/var)."""
        if precision <= 0.0:
            return UNINFORMATIVE
        return cls(mean=precision_mean / precision, variance=1.0 / precision)

    def with_added_variance(self, extra: float) -> GaussianBelief:
        """Return this belief convolved with zero-mean noise of variance ``extra``."""
        return GaussianBelief(self.mean, self.variance + extra)


UNINFORMATIVE = GaussianBelief(0.0, math.inf)


# ---------------------------------------------------------------------------
# Message algebra
# ---------------------------------------------------------------------------


def product(a: GaussianBelief, b: GaussianBelief) -> GaussianBelief:
    """Multiply two Gaussian messages about the same quantity.

    var = a.var * b.var / (a.var + b.var)
    mean = (a.mean * b.var + b.mean * a.var) / (a.var + b.var)
    """
    if a.is_uninformative:
        return b
    if b.is_uninformative:
        return a

    total = a.variance + b.variance
    if total == 0.0:
        raise NumericalError("product of two zero-variance beliefs is undefined")

    return GaussianBelief(
        mean=(a.mean * b.variance + b.mean * a.variance) / total,
        variance=a.variance * b.variance / total,
    )


def divide(a: GaussianBelief, b: GaussianBelief) -> GaussianBelief:
    """Remove message ``b`` from belief ``a`` (inverse of ``product``)."""
    if b.is_uninformative:
        return a
    return GaussianBelief.from_precision(
        a.precision - b.precision,
        a.precision_mean - b.precision_mean,
    )


# ---------------------------------------------------------------------------
# Truncation correctors
# ---------------------------------------------------------------------------


def norm_cdf(x: float) -> float:
    """Standard normal CDF."""
    return float(ndtr(x))


def _mills_ratio_asymptotic(z: float) -> float:
    # phi(z)/Phi(z) for z -> -inf, from Phi(z) ~ phi(z)/|z| * (1 - 1/z^2 + 3/z^4 - ...)
    z2 = z * z
    series = 1.0 - 1.0 / z2 + 3.0 / z2**2 - 15.0 / z2**3 + 105.0 / z2**4
    return -z / series


def corrector_v(z: float) -> float:
    """Additive mean corrector v(z) = phi(z) / Phi(z)."""
    if z < ASYMPTOTIC_Z:
        return _mills_ratio_asymptotic(z)
    log_pdf = -0.5 * z * z - LOG_SQRT_2PI
    return math.exp(log_pdf - float(log_ndtr(z)))


def corrector_w(z: float) -> float:
    """Multiplicative variance corrector w(z) = v(z) * (v(z) + z)."""
    v = corrector_v(z)
    w = v * (v + z)
    return min(max(w, 0.0), W_MAX)


def truncated_correction(t: GaussianBelief, sign: int) -> GaussianBelief:
    """Message that truncates ``t`` to the ``sign`` half-line at zero.

    ``product(t, truncated_correction(t, sign))`` has the mean and variance
    of ``t`` conditioned on ``sign * x > 0``.
    """
    if sign not in (1, -1):
        raise ValueError(f"sign must be +1 or -1, got {sign!r}")
    if not t.is_valid:
        raise NumericalError(f"cannot truncate degenerate belief {t}")

    stddev = t.stddev
    z = sign * t.mean / stddev
    v = corrector_v(z)
    w = corrector_w(z)

    truncated = GaussianBelief(
        mean=t.mean + sign * stddev * v,
        variance=t.variance * (1.0 - w),
    )
    return divide(truncated, t)
