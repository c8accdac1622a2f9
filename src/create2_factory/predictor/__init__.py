"""Address predictors for the salted, sequential and counterfactual factories."""

from create2_factory.core.create2 import predict_counterfactual, predict_salted
from .sequential import NonceTable, Reservation

__all__ = [
    "NonceTable",
    "Reservation",
    "predict_counterfactual",
    "predict_salted",
]
