"""Pydantic schemas for the emotion and compliance stage outputs.

Both double as structured-output schemas sent to the model, so every field
carries a description the model can follow.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

NAVARASAS = (
    "Shringara",
    "Karuna",
    "Veera",
    "Raudra",
    "Hasya",
    "Bhayanaka",
    "Bibhatsa",
    "Adbhuta",
    "Shanta",
)


def _coerce_to_str(v: Any) -> str:
    """Coerce list/non-str values to comma-separated string.

    Some LLM providers (e.g. Ollama) return arrays for fields declared as
    string in the JSON schema.
    """
    if isinstance(v, list):
        return ", ".join(str(item) for item in v)
    return v


def _coerce_to_list(v: Any) -> list:
    """Accept a single comma-separated string where a list is expected."""
    if v is None:
        return []
    if isinstance(v, str):
        return [part.strip() for part in v.split(",") if part.strip()]
    return v


CoercedStr = Annotated[str, BeforeValidator(_coerce_to_str)]
CoercedList = Annotated[list[str], BeforeValidator(_coerce_to_list)]


class EmotionAnalysis(BaseModel):
    """Emotional core of the request, produced once per run."""

    model_config = ConfigDict(frozen=True)

    sentiment: CoercedStr = Field(description="Positive, Negative, or Neutral")
    navarasa: CoercedStr = Field(
        description="The dominant Rasa (e.g., Shringara, Raudra, Karuna, Shanta)"
    )
    intensity: int = Field(description="Emotional weight on a scale of 1 to 10")
    vibe_description: CoercedStr = Field(
        description="A poetic description of the detected vibe"
    )
    suggested_keywords: CoercedList = Field(
        default_factory=list,
        description="Keywords that match this emotion",
    )

    @field_validator("intensity", mode="before")
    @classmethod
    def clamp_intensity(cls, v):
        """Clamp to 1-10; models occasionally answer 0 or 11."""
        return max(1, min(10, int(round(float(v)))))


class ComplianceReport(BaseModel):
    """Plagiarism and originality report attached to the final lyrics."""

    originality_score: int = Field(description="0 to 100, higher is more original")
    flagged_phrases: CoercedList = Field(
        default_factory=list,
        description="Phrases that sound too similar to existing famous songs",
    )
    similar_songs: CoercedList = Field(
        default_factory=list,
        description="Names of songs that share style or lyrics",
    )
    verdict: CoercedStr = Field(description="Safe, Caution, or High Risk")

    @field_validator("originality_score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        return max(0, min(100, int(round(float(v)))))


NEUTRAL_EMOTION = EmotionAnalysis(
    sentiment="Neutral",
    navarasa="Shanta",
    intensity=5,
    vibe_description="Balanced and calm",
    suggested_keywords=[],
)

UNCHECKED_COMPLIANCE = ComplianceReport(
    originality_score=100,
    flagged_phrases=[],
    similar_songs=[],
    verdict="Error Checking",
)
