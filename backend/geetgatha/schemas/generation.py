"""Pydantic schemas for the user's song request parameters.

GenerationConfiguration carries the sidebar selections. Any enumerated
field may hold AUTO, meaning "derive this from the emotion analysis"; the
settings resolver replaces every AUTO before the research stage runs.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

AUTO = "Auto"
CUSTOM = "Custom"
NO_CEREMONY = "None"

COMPLEXITY_LEVELS = ("Simple", "Poetic", "Complex")

# Fields the resolver is responsible for.
RESOLVABLE_FIELDS = (
    "theme",
    "mood",
    "style",
    "complexity",
    "rhyme_scheme",
    "singer_config",
)

# Base field -> free-text override used when the base field is "Custom".
CUSTOM_OVERRIDES = {
    "theme": "custom_theme",
    "mood": "custom_mood",
    "style": "custom_style",
    "rhyme_scheme": "custom_rhyme_scheme",
}


class LanguageProfile(BaseModel):
    """Primary output language plus two code-mixing languages."""

    model_config = ConfigDict(frozen=True)

    primary: str = "Telugu"
    secondary: str = "Telugu"
    tertiary: str = "Telugu"

    @property
    def is_mixed(self) -> bool:
        """True when the song should fuse more than one language."""
        return self.primary != self.secondary or self.primary != self.tertiary

    @property
    def label(self) -> str:
        return f"{self.primary} Mix" if self.is_mixed else self.primary


class GenerationConfiguration(BaseModel):
    """Song request parameters, possibly containing AUTO sentinels."""

    theme: str = AUTO
    mood: str = AUTO
    style: str = AUTO
    complexity: str = AUTO
    rhyme_scheme: str = AUTO
    singer_config: str = AUTO
    ceremony: str = NO_CEREMONY

    custom_theme: Optional[str] = None
    custom_mood: Optional[str] = None
    custom_style: Optional[str] = None
    custom_rhyme_scheme: Optional[str] = None

    def auto_fields(self) -> list[str]:
        """Return the names of fields still holding AUTO."""
        return [name for name in RESOLVABLE_FIELDS if getattr(self, name) == AUTO]

    @property
    def is_resolved(self) -> bool:
        return not self.auto_fields()

    def effective(self, field: str) -> str:
        """Return the value a consumer should use for ``field``.

        When the base field is the literal "Custom" and its paired override
        is filled in, the override wins. Otherwise the base value is used.
        """
        value = getattr(self, field)
        override_name = CUSTOM_OVERRIDES.get(field)
        if value == CUSTOM and override_name:
            override = getattr(self, override_name)
            if override and override.strip():
                return override.strip()
        return value


class GenerationRequest(BaseModel):
    """Everything a caller supplies to start one pipeline run."""

    request_text: str = Field(min_length=1)
    language: LanguageProfile = LanguageProfile()
    generation: GenerationConfiguration = GenerationConfiguration()
