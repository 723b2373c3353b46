"""GeetGatha - multi-agent song lyric generation.

Routes a free-form song request through a fixed sequence of language-model
stages (multimodal, emotion, research, lyricist, compliance, review,
formatter) and returns finished lyrics with a compliance report.

Entry points:
    geetgatha.orchestrator.pipeline.run_pipeline  - run one request end-to-end
    geetgatha.api.app:app                         - FastAPI application
    geetgatha.cli.commands:app                    - Typer CLI
"""

import logging

__version__ = "0.1.0"

logger = logging.getLogger(__name__)
