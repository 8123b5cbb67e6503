"""Online Bayesian logistic regression (AdPredictor) trained by
Expectation Propagation over per-feature Gaussian weight beliefs.
"""

from .calibration import CalibrationTracker
from .config import ModelConfiguration, parse_params
from .errors import ConfigurationError, DataFormatError, ModelFormatError, NumericalError
from .gaussian import GaussianBelief, product, truncated_correction
from .model import EPLogisticRegression
from .store import WeightPosteriorStore
from .types import DataSet, Example, FeatureActivation

__all__ = [
    "CalibrationTracker",
    "ConfigurationError",
    "DataFormatError",
    "DataSet",
    "EPLogisticRegression",
    "Example",
    "FeatureActivation",
    "GaussianBelief",
    "ModelConfiguration",
    "ModelFormatError",
    "NumericalError",
    "WeightPosteriorStore",
    "parse_params",
    "product",
    "truncated_correction",
]
