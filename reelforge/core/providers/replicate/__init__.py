"""Replicate provider client."""

from reelforge.core.providers.replicate.client import ReplicateClient, ReplicatePredictionError
from reelforge.core.providers.replicate.schemas import (
    ReplicatePrediction,
    ReplicatePredictionStatus,
)

__all__ = [
    'ReplicateClient',
    'ReplicatePrediction',
    'ReplicatePredictionError',
    'ReplicatePredictionStatus',
]
