"""Model configuration and logging setup.

Defaults come from environment variables; model parameters arrive as a
string map (``{"beta": "0.1"}``) and are validated into an immutable
``ModelConfiguration``.
"""

from __future__ import annotations

import logging
import math
import os
import sys
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pythonjsonlogger import jsonlogger

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Model defaults
# ---------------------------------------------------------------------------
INIT_VAR = 1.0                   # Prior variance of every feature weight
DEFAULT_BETA = os.environ.get("ADPREDICTOR_BETA", "0.1")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

RECOGNIZED_PARAMS = frozenset({"beta"})


class ModelConfiguration(BaseModel):
    """Hyperparameters of the EP logistic regression model."""

    model_config = ConfigDict(frozen=True)

    init_var: float = Field(
        default=INIT_VAR, gt=0.0,
        description="Prior variance of each feature weight.",
    )
    beta: float = Field(
        ..., ge=0.0, allow_inf_nan=False,
        description="Observation-noise variance added to the score.",
    )

    @property
    def variance_floor(self) -> float:
        return self.init_var * 0.01


def parse_params(params: Mapping[str, str]) -> ModelConfiguration:
    """Validate a string parameter map into a ``ModelConfiguration``.

    Only ``beta`` is recognized; ``init_var`` is fixed.

    Raises:
        ConfigurationError: If ``beta`` is missing, unparsable, negative
            or not finite.
    """
    for key in params:
        if key not in RECOGNIZED_PARAMS:
            logger.debug("Ignoring unrecognized parameter %r", key)

    raw = params.get("beta")
    if raw is None:
        raise ConfigurationError("missing required parameter 'beta'")
    try:
        beta = float(str(raw).strip())
    except ValueError:
        raise ConfigurationError(f"parameter 'beta' is not a number: {raw!r}") from None
    if not math.isfinite(beta):
        raise ConfigurationError(f"parameter 'beta' must be finite, got {raw!r}")

    try:
        return ModelConfiguration(beta=beta)
    except ValidationError as e:
        raise ConfigurationError(f"invalid parameter 'beta'={raw!r}: {e}") from e


def setup_logging(level: str | None = None, stream=None) -> None:
    """Configure structured JSON logging."""
    handler = logging.StreamHandler(stream or sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel((level or LOG_LEVEL).upper())
