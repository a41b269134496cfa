"""Winglets transform engine."""

from winglets.engine.registry import transform, Layer, get_registry
from winglets.engine.context import PipelineContext, CategoryContext, PointSet
from winglets.engine.pipeline import Pipeline, create_pipeline

__all__ = [
    "transform",
    "Layer",
    "get_registry",
    "PipelineContext",
    "CategoryContext",
    "PointSet",
    "Pipeline",
    "create_pipeline",
]
