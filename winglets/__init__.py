"""Winglets: density-boundary glyphs and silhouette scores for categorized scatterplots."""

from winglets.engine.config import PipelineConfig
from winglets.engine.orchestrator import Winglets
from winglets.errors import InsufficientData, InvalidConfiguration, NoContourFound, WingletsError
from winglets.models.options import Options

__version__ = "0.1.0"

__all__ = [
    "Winglets",
    "Options",
    "PipelineConfig",
    "WingletsError",
    "InvalidConfiguration",
    "InsufficientData",
    "NoContourFound",
]
