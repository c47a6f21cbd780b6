"""Tests for settings and scoring override loading."""
import logging

import pytest

from core.config import DEFAULT_MAX_EMAILS, DEFAULT_TECH_STACK_TIMEOUT_MS, load_scoring_config, load_settings
from core.errors import ConfigurationError
from models.scoring import ScoringConfig


def test_defaults_without_environment():
    settings = load_settings(use_dotenv=False)

    assert settings.whoxy_api_key == ""
    assert settings.hunter_api_key == ""
    assert settings.tech_stack_timeout_ms == DEFAULT_TECH_STACK_TIMEOUT_MS
    assert settings.default_max_emails == DEFAULT_MAX_EMAILS
    assert settings.scoring == ScoringConfig()


def test_credentials_and_tunables_from_environment(monkeypatch):
    monkeypatch.setenv("WHOXY_API_KEY", "whoxy-key")
    monkeypatch.setenv("HUNTER_API_KEY", " hunter-key ")
    monkeypatch.setenv("SNOV_API_KEY", "snov-key")
    monkeypatch.setenv("TECH_STACK_TIMEOUT_MS", "2500")
    monkeypatch.setenv("DEFAULT_MAX_EMAILS", "8")

    settings = load_settings(use_dotenv=False)

    assert settings.whoxy_api_key == "whoxy-key"
    assert settings.hunter_api_key == "hunter-key"
    assert settings.snov_api_key == "snov-key"
    assert settings.snov_client_id == ""
    assert settings.tech_stack_timeout_ms == 2500
    assert settings.default_max_emails == 8


@pytest.mark.parametrize("raw", ["soon", "-5", "0"])
def test_malformed_numbers_fall_back_with_warning(monkeypatch, caplog, raw):
    monkeypatch.setenv("DEFAULT_MAX_EMAILS", raw)

    with caplog.at_level(logging.WARNING, logger="core.config"):
        settings = load_settings(use_dotenv=False)

    assert settings.default_max_emails == DEFAULT_MAX_EMAILS
    assert "DEFAULT_MAX_EMAILS" in caplog.text


def test_list_overrides_from_environment(monkeypatch):
    monkeypatch.setenv("TARGET_COUNTRIES", "gb, us ,")
    monkeypatch.setenv("VALUABLE_PLATFORMS", "Shopify,Ghost")
    monkeypatch.setenv("SPAM_KEYWORDS", "Casino,loan")

    scoring = load_settings(use_dotenv=False).scoring

    assert scoring.registration.target_countries == ("GB", "US")
    assert scoring.tech_stack.valuable_platforms == ("Shopify", "Ghost")
    assert scoring.penalties.spam_indicators == ("casino", "loan")


def test_scoring_file_from_environment(monkeypatch, tmp_path):
    path = tmp_path / "scoring.yaml"
    path.write_text("domain_age:\n  under_7_days: 30\npenalties:\n  spam_vetoes_total: false\n")
    monkeypatch.setenv("SCORING_CONFIG_FILE", str(path))

    scoring = load_settings(use_dotenv=False).scoring

    assert scoring.domain_age.under_7_days == 30
    assert scoring.domain_age.older == 5
    assert scoring.penalties.spam_vetoes_total is False


def test_environment_lists_apply_on_top_of_file(monkeypatch, tmp_path):
    path = tmp_path / "scoring.yaml"
    path.write_text("registration:\n  target_countries: [FR]\n  target_country_bonus: 12\n")
    monkeypatch.setenv("TARGET_COUNTRIES", "NL")

    scoring = load_settings(scoring_config_file=path, use_dotenv=False).scoring

    assert scoring.registration.target_countries == ("NL",)
    assert scoring.registration.target_country_bonus == 12


def test_empty_scoring_file_keeps_defaults(tmp_path):
    path = tmp_path / "scoring.yaml"
    path.write_text("")

    assert load_scoring_config(path) == ScoringConfig()


@pytest.mark.parametrize("content", [
    "domain_age: [unclosed",
    "- just\n- a list\n",
    "domain_age:\n  ancient: 1\n",
])
def test_malformed_scoring_file_raises(tmp_path, content):
    path = tmp_path / "scoring.yaml"
    path.write_text(content)

    with pytest.raises(ConfigurationError):
        load_scoring_config(path)


def test_missing_scoring_file_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        load_scoring_config(tmp_path / "missing.yaml")


def test_example_scoring_file_is_valid():
    from pathlib import Path

    example = Path(__file__).resolve().parent.parent / "config" / "scoring.example.yaml"
    assert load_scoring_config(example) == ScoringConfig()
