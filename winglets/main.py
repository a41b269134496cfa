"""Engine factory and logging setup."""

from __future__ import annotations

import logging

from dotenv import load_dotenv

from winglets.config import settings
from winglets.engine.config import PipelineConfig
from winglets.engine.orchestrator import Winglets
from winglets.render.lines import LineFactory

load_dotenv()


def configure_logging(level: str | None = None) -> None:
    name = (level or settings.winglets_log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def create_winglets(line_factory: LineFactory, **options) -> Winglets:
    """Winglets engine configured from the environment."""
    config = PipelineConfig.from_settings(settings)
    return Winglets(line_factory, config=config, options=options or None)
