"""Settings resolver tests: totality, determinism and rule boundaries."""

import itertools

import pytest

from geetgatha.orchestrator.settings_resolver import resolve_auto_settings
from geetgatha.schemas.analysis import NAVARASAS, EmotionAnalysis
from geetgatha.schemas.generation import AUTO, RESOLVABLE_FIELDS, GenerationConfiguration


def _emotion(navarasa="Shanta", intensity=5, sentiment="Neutral", vibe="Balanced and calm"):
    return EmotionAnalysis(
        sentiment=sentiment,
        navarasa=navarasa,
        intensity=intensity,
        vibe_description=vibe,
    )


def test_01_resolves_every_auto_field_for_all_inputs():
    """No AUTO survives for any navarasa/intensity/sentiment combination."""
    rasas = list(NAVARASAS) + ["Unknown", "", AUTO]
    vibes = ["Rain on the rooftop", "", AUTO]
    sentiments = ["Positive", "Negative", "Neutral", AUTO]
    for navarasa, intensity, sentiment, vibe in itertools.product(rasas, range(1, 11), sentiments, vibes):
        resolved = resolve_auto_settings(GenerationConfiguration(), _emotion(navarasa, intensity, sentiment, vibe))
        assert resolved.auto_fields() == [], (navarasa, intensity, sentiment, vibe)


def test_02_deterministic():
    config = GenerationConfiguration(style="Folk")
    emotion = _emotion("Veera", 9, "Positive", "Hero entry")

    assert resolve_auto_settings(config, emotion) == resolve_auto_settings(config, emotion)


def test_03_does_not_mutate_input():
    config = GenerationConfiguration()
    resolve_auto_settings(config, _emotion())

    assert all(getattr(config, field) == AUTO for field in RESOLVABLE_FIELDS)


def test_04_explicit_values_pass_through():
    config = GenerationConfiguration(
        theme="Friendship",
        mood="Custom",
        custom_mood="Bittersweet",
        style="Classical",
        complexity="Complex",
        rhyme_scheme="ABAB",
        singer_config="Female Solo",
    )

    assert resolve_auto_settings(config, _emotion("Raudra", 10)) == config


def test_05_mood_and_theme_come_from_emotion():
    resolved = resolve_auto_settings(
        GenerationConfiguration(), _emotion("Karuna", 4, "Negative", "Farewell at the station")
    )

    assert resolved.mood == "Karuna (Negative)"
    assert resolved.theme == "Farewell at the station"
    assert resolved.rhyme_scheme == "AABB"


@pytest.mark.parametrize("vibe", ["", "   ", "Stars over the village"])
def test_06_theme_is_vibe_verbatim(vibe):
    resolved = resolve_auto_settings(GenerationConfiguration(), _emotion("Adbhuta", 5, vibe=vibe))

    assert resolved.theme == vibe


def test_10_sentinel_vibe_gets_neutral_theme():
    resolved = resolve_auto_settings(GenerationConfiguration(), _emotion(AUTO, 5, vibe=AUTO))

    assert resolved.theme == "Balanced and calm"
    assert resolved.auto_fields() == []


@pytest.mark.parametrize(
    "navarasa,intensity,style",
    [
        ("Shanta", 8, "Fast Beat/Mass"),
        ("Shanta", 7, "Melody"),
        ("Veera", 2, "Fast Beat/Mass"),
        ("Hasya", 5, "Fast Beat/Mass"),
        ("Karuna", 6, "Melody"),
        ("Bhayanaka", 5, "Folk"),
        ("Bibhatsa", 7, "Folk"),
    ],
)
def test_07_style_rules(navarasa, intensity, style):
    assert resolve_auto_settings(GenerationConfiguration(), _emotion(navarasa, intensity)).style == style


@pytest.mark.parametrize("intensity,complexity", [(1, "Poetic"), (7, "Poetic"), (8, "Simple"), (10, "Simple")])
def test_08_complexity_boundary(intensity, complexity):
    assert resolve_auto_settings(GenerationConfiguration(), _emotion(intensity=intensity)).complexity == complexity


@pytest.mark.parametrize(
    "navarasa,singer",
    [("Shringara", "Duet (Male + Female)"), ("Hasya", "Group Chorus"), ("Veera", "Male Solo"), ("", "Male Solo")],
)
def test_09_singer_rules(navarasa, singer):
    assert resolve_auto_settings(GenerationConfiguration(), _emotion(navarasa)).singer_config == singer
