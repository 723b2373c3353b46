"""Scenario (ceremony) lookup table for the lyricist stage.

The table is data, not configuration: the lyricist stage receives it as an
argument so callers can swap in their own (see load_scenarios).
"""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field


class Scenario(BaseModel):
    id: str
    label: str
    prompt_context: str


class ScenarioCategory(BaseModel):
    category: str
    events: list[Scenario] = Field(default_factory=list)


SCENARIO_KNOWLEDGE_BASE: list[ScenarioCategory] = [
    ScenarioCategory(
        category="Wedding Ceremonies",
        events=[
            Scenario(
                id="haldi",
                label="Haldi / Pellikuthuru",
                prompt_context=(
                    "Turmeric ceremony before the wedding. Playful teasing by cousins, "
                    "yellow colours, bangles, the bride's glow, gentle folk rhythm."
                ),
            ),
            Scenario(
                id="sangeet",
                label="Sangeet Night",
                prompt_context=(
                    "Musical celebration of both families. Dance-floor energy, friendly "
                    "rivalry between bride's and groom's sides, dhol beats, call-and-response."
                ),
            ),
            Scenario(
                id="vidaai",
                label="Vidaai / Appagintalu",
                prompt_context=(
                    "The bride leaves her parents' home. Tearful gratitude, childhood memories, "
                    "father's silent pride, mother's blessings, the threshold as a metaphor."
                ),
            ),
        ],
    ),
    ScenarioCategory(
        category="Festivals",
        events=[
            Scenario(
                id="sankranti",
                label="Sankranti / Pongal",
                prompt_context=(
                    "Harvest festival. Rangoli at dawn, kites, cattle decorated with bells, "
                    "new rice boiling over as a sign of abundance, gratitude to the farmer."
                ),
            ),
            Scenario(
                id="diwali",
                label="Diwali",
                prompt_context=(
                    "Festival of lights. Rows of diyas, victory of light over darkness, "
                    "family reunions, sweets shared with neighbours, fireworks in the night sky."
                ),
            ),
            Scenario(
                id="holi",
                label="Holi",
                prompt_context=(
                    "Festival of colours. Gulal in the air, water balloons, Radha-Krishna "
                    "playfulness, strangers becoming friends, springtime mischief."
                ),
            ),
        ],
    ),
    ScenarioCategory(
        category="Life Events",
        events=[
            Scenario(
                id="seemantham",
                label="Seemantham / Baby Shower",
                prompt_context=(
                    "Blessing ceremony for the expectant mother. Lullaby tenderness, "
                    "bangles for protection, hopes for the unborn child, elders' blessings."
                ),
            ),
            Scenario(
                id="birthday",
                label="Birthday",
                prompt_context=(
                    "Birthday celebration. Childhood milestones, candles and wishes, "
                    "friends' affection, looking forward to the year ahead."
                ),
            ),
        ],
    ),
]


def find_scenario(
    table: list[ScenarioCategory],
    scenario_id: Optional[str],
) -> Optional[Scenario]:
    """Return the scenario with ``scenario_id``, or None if absent."""
    if not scenario_id:
        return None
    for category in table:
        for event in category.events:
            if event.id == scenario_id:
                return event
    return None


def load_scenarios(path: Union[str, Path]) -> list[ScenarioCategory]:
    """Load a scenario table from a YAML file.

    The file holds a list of ``{category, events: [{id, label, prompt_context}]}``.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    return [ScenarioCategory.model_validate(item) for item in data]
