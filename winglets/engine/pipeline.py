"""Pipeline orchestrator: global layer once, then category transforms fanned out per category."""

from __future__ import annotations

import importlib
import logging
import pkgutil
import time
from concurrent.futures import ThreadPoolExecutor

from winglets.engine.config import PipelineConfig
from winglets.engine.context import CategoryContext, PipelineContext
from winglets.engine.registry import Layer, TransformRegistry, get_registry
from winglets.errors import CategoryError

logger = logging.getLogger(__name__)

_TRANSFORM_PACKAGES = ["layer0", "layer1"]


def register_transforms() -> None:
    """Import all transform modules so @transform decorators fire."""
    for layer_name in _TRANSFORM_PACKAGES:
        package_name = f"winglets.engine.{layer_name}"
        package = importlib.import_module(package_name)
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            importlib.import_module(f"{package_name}.{module_name}")


class Pipeline:
    """Orchestrates the transform pipeline."""

    def __init__(
        self,
        registry: TransformRegistry | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or PipelineConfig()

    def run(self, ctx: PipelineContext) -> PipelineContext:
        """Run the global layer to completion, then every category's transforms.

        Global failures propagate. A CategoryError fails only its category.
        """
        start = time.perf_counter()

        for spec in self.registry.get_layer(Layer.GLOBAL):
            t0 = time.perf_counter()
            spec.fn(ctx)
            ctx.completed_transforms.add(spec.id)
            logger.debug("  %s completed in %.1fms", spec.id, (time.perf_counter() - t0) * 1000)

        tasks = ctx.category_tasks()
        for cat in self.run_categories(tasks):
            ctx.categories[cat.category] = cat
            if cat.error is not None:
                ctx.errors[cat.category] = str(cat.error)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %d categories (%d failed) in %.0fms",
            len(ctx.categories),
            len(ctx.errors),
            total,
        )
        return ctx

    def run_categories(self, tasks: list[CategoryContext]) -> list[CategoryContext]:
        """Fan out per-category work and join; results keep the task order."""
        if not tasks:
            return []
        workers = self.config.max_workers
        if workers <= 1 or len(tasks) <= 1:
            return [self.run_category(t) for t in tasks]
        with ThreadPoolExecutor(max_workers=min(workers, len(tasks))) as executor:
            return list(executor.map(self.run_category, tasks))

    def run_category(self, cat: CategoryContext) -> CategoryContext:
        """Run the category layer in dependency order for one task."""
        for spec in self.registry.get_layer(Layer.CATEGORY):
            t0 = time.perf_counter()
            try:
                spec.fn(cat)
            except CategoryError as e:
                if e.category is None:
                    e.category = cat.category
                cat.error = e
                logger.warning("  %s FAILED for category %r: %s", spec.id, cat.category, e)
                break
            cat.completed_transforms.add(spec.id)
            logger.debug(
                "  %s [%r] completed in %.1fms",
                spec.id,
                cat.category,
                (time.perf_counter() - t0) * 1000,
            )
        return cat


def create_pipeline(config: PipelineConfig | None = None) -> Pipeline:
    """Factory function for creating a pipeline instance with all transforms loaded."""
    register_transforms()
    return Pipeline(config=config)
