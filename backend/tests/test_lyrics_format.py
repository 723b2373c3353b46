"""Display rendering of structured lyrics."""

import pytest

from geetgatha.schemas.lyrics import GeneratedLyrics, LyricSection
from geetgatha.services.lyrics_format import format_lyrics_for_display, normalize_section_header


@pytest.mark.parametrize(
    "name,header",
    [
        ("Pallavi", "[Chorus]"),
        ("[Mukhda]", "[Chorus]"),
        ("Charanam 2", "[Verse]"),
        ("Anupallavi", "[Verse]"),
        ("Antara", "[Verse]"),
        ("[Bridge]", "[Bridge]"),
        ("  Verse 3 ", "[Verse 3]"),
    ],
)
def test_01_section_headers(name, header):
    assert normalize_section_header(name) == header


def test_02_full_rendering():
    lyrics = GeneratedLyrics(
        title="Deepala Panduga",
        language="Telugu",
        ragam="Kalyani",
        taalam="Adi",
        structure="Intro-V1-C-Outro",
        sections=[
            LyricSection(section_name="Intro", lines=["hmm hmm"]),
            LyricSection(section_name="Pallavi", lines=["deepam", "velugu"]),
        ],
    )

    assert format_lyrics_for_display(lyrics) == (
        "Title: Deepala Panduga\n"
        "Language: Telugu\n"
        "Raagam: Kalyani\n"
        "Taalam: Adi\n"
        "Structure: Intro-V1-C-Outro\n"
        "\n"
        "[Intro]\nhmm hmm\n\n"
        "[Chorus]\ndeepam\nvelugu\n\n"
    )


def test_03_optional_metadata_omitted():
    lyrics = GeneratedLyrics(title="Chinni", sections=[])

    assert format_lyrics_for_display(lyrics) == "Title: Chinni\nLanguage: \n\n"
