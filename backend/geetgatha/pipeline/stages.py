"""Build the default StageSet from a model adapter."""

from functools import partial
from typing import Optional

from geetgatha.knowledge.scenarios import SCENARIO_KNOWLEDGE_BASE, ScenarioCategory
from geetgatha.pipeline.base import StageSet
from geetgatha.pipeline.compliance import run_compliance_stage
from geetgatha.pipeline.emotion import run_emotion_stage
from geetgatha.pipeline.formatter import run_formatter_stage
from geetgatha.pipeline.lyricist import run_lyricist_stage
from geetgatha.pipeline.multimodal import run_multimodal_stage
from geetgatha.pipeline.research import run_research_stage
from geetgatha.pipeline.review import run_review_stage
from geetgatha.services.llm import LLMAdapter


def build_stages(
    adapter: LLMAdapter,
    scenarios: Optional[list[ScenarioCategory]] = None,
) -> StageSet:
    """Bind every stage to ``adapter``; the lyricist also gets the scenario table."""
    return StageSet(
        multimodal=partial(run_multimodal_stage, adapter),
        emotion=partial(run_emotion_stage, adapter),
        research=partial(run_research_stage, adapter),
        lyricist=partial(
            run_lyricist_stage,
            adapter,
            scenarios=scenarios if scenarios is not None else SCENARIO_KNOWLEDGE_BASE,
        ),
        compliance=partial(run_compliance_stage, adapter),
        review=partial(run_review_stage, adapter),
        formatter=partial(run_formatter_stage, adapter),
    )
