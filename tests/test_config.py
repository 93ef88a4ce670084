import pytest

from txpulse.config import (
    CATEGORY_TABLE,
    COLLECTOR_PROFILES,
    TOPIC_SEEDS,
    TX_REGIONS,
    Settings,
    default_config,
)


def test_collector_profiles_pick_formula_and_weighting() -> None:
    reddit = Settings(COLLECTOR="reddit")
    assert (reddit.sentiment_formula, reddit.score_weighting) == COLLECTOR_PROFILES["reddit"]

    news = Settings(COLLECTOR="google_news")
    assert news.sentiment_formula == "ratio"
    assert news.score_weighting == "uniform"


def test_explicit_formula_overrides_profile() -> None:
    settings = Settings(COLLECTOR="reddit", SENTIMENT_FORMULA="ratio", SCORE_WEIGHTING="uniform")
    assert settings.sentiment_formula == "ratio"
    assert settings.score_weighting == "uniform"


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("COLLECTOR", "google_news")
    monkeypatch.setenv("USE_DEMO", "true")
    monkeypatch.setenv("HISTORY_DAYS", "7")
    settings = Settings()
    assert settings.COLLECTOR == "google_news"
    assert settings.USE_DEMO is True
    assert settings.HISTORY_DAYS == 7


def test_default_config_tables_are_read_only() -> None:
    config = default_config("densityNormalized")
    assert config.sentiment_formula == "densityNormalized"
    assert config.topic_names == tuple(TOPIC_SEEDS)
    assert list(config.regions) == list(TX_REGIONS)
    assert list(config.categories) == list(CATEGORY_TABLE)

    with pytest.raises(TypeError):
        config.topic_seeds["new topic"] = ("anything",)
    with pytest.raises(AttributeError):
        config.sentiment_formula = "ratio"
