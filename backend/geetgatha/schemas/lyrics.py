"""Pydantic schemas for structured lyric output.

The lyricist and review stages ask the model for GeneratedLyrics and render
it to display text; the formatter returns FormattedLyrics for Suno.com.
"""

from typing import Optional

from pydantic import BaseModel, Field

from geetgatha.schemas.analysis import CoercedList, CoercedStr


class LyricSection(BaseModel):
    """One tagged block of the song (verse, chorus, bridge...)."""

    section_name: CoercedStr = Field(
        description="STRICTLY ENGLISH TAGS IN SQUARE BRACKETS: [Chorus], [Verse 1], "
        "[Verse 2], [Verse 3], [Bridge], [Intro], [Outro]."
    )
    lines: CoercedList = Field(
        description="The lyric lines, written in the primary language's native script."
    )


class GeneratedLyrics(BaseModel):
    """A complete song as returned by the lyricist or review stage."""

    title: CoercedStr = Field(description="Song title in native script")
    language: CoercedStr = Field(
        default="",
        description="Description of the language mix used",
    )
    ragam: Optional[CoercedStr] = Field(
        default=None,
        description="Suggested Carnatic/Hindustani Raagam",
    )
    taalam: Optional[CoercedStr] = Field(
        default=None,
        description="Suggested time signature or beat",
    )
    structure: Optional[CoercedStr] = Field(
        default=None,
        description="Structure overview (e.g., Intro-V1-C-V2-C-Br-V3-C-Outro)",
    )
    sections: list[LyricSection] = Field(description="Ordered song sections")


class FormattedLyrics(BaseModel):
    """Suno.com-ready variant of the polished lyrics."""

    style_prompt: CoercedStr = Field(
        default="",
        description="Comma-separated genre, instrument and vocal style tags for Suno.com",
    )
    formatted_lyrics: CoercedStr = Field(
        description="Raw tag-based lyrics with metadata lines removed"
    )
