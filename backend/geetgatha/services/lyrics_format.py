"""Render structured lyrics to the plain-text form shown in chat.

Section headers are always English tags in square brackets. Native section
names are normalised: Pallavi/Mukhda become [Chorus], Charanam, Anupallavi
and Antara become [Verse].
"""

import re

from geetgatha.schemas.lyrics import GeneratedLyrics

_BRACKETS_RE = re.compile(r"[\[\](){}]")

# Checked in order; later matches override earlier ones
_NATIVE_TAGS = (
    ("pallavi", "Chorus"),
    ("charanam", "Verse"),
    ("anupallavi", "Verse"),
    ("mukhda", "Chorus"),
    ("antara", "Verse"),
)


def normalize_section_header(name: str) -> str:
    """Return ``name`` as a bracketed English section tag."""
    header = _BRACKETS_RE.sub("", name.strip()).strip()
    lowered = header.lower()
    for native, english in _NATIVE_TAGS:
        if native in lowered:
            header = english
    return f"[{header}]"


def format_lyrics_for_display(data: GeneratedLyrics) -> str:
    """Render GeneratedLyrics as a metadata block followed by tagged sections."""
    output = f"Title: {data.title}\n"
    output += f"Language: {data.language}\n"
    if data.ragam:
        output += f"Raagam: {data.ragam}\n"
    if data.taalam:
        output += f"Taalam: {data.taalam}\n"
    if data.structure:
        output += f"Structure: {data.structure}\n"
    output += "\n"

    for section in data.sections:
        output += f"{normalize_section_header(section.section_name)}\n"
        for line in section.lines:
            output += f"{line}\n"
        output += "\n"

    return output
