import logging

import pytest
from pydantic import ValidationError

from mentor_match.config import DEFAULT_SENDER, load_settings, parse_weights
from mentor_match.logging_config import setup_logging

_VARS = (
    "RESEND_API_KEY",
    "MENTOR_MATCH_DATA_PATH",
    "MENTOR_MATCH_EMAIL_FROM",
    "MENTOR_MATCH_EMAIL_SANDBOX",
    "MENTOR_MATCH_WEIGHTS",
    "MENTOR_MATCH_THRESHOLD",
    "MENTOR_MATCH_MAX_MATCHES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_load_settings_defaults():
    s = load_settings()
    assert s.resend_api_key == ""
    assert s.data_path == "mentor_match_data.json"
    assert s.email_from == DEFAULT_SENDER
    assert s.email_sandbox is True
    assert s.matching.threshold == 70
    assert s.matching.max_matches_per_mentee == 3
    assert s.matching.weights.availability == 0.3


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", " re_abc ")
    monkeypatch.setenv("MENTOR_MATCH_DATA_PATH", "/tmp/mm.json")
    monkeypatch.setenv("MENTOR_MATCH_EMAIL_SANDBOX", "off")
    monkeypatch.setenv("MENTOR_MATCH_THRESHOLD", "55")
    monkeypatch.setenv("MENTOR_MATCH_MAX_MATCHES", "5")
    monkeypatch.setenv("MENTOR_MATCH_WEIGHTS", "expertise=0.5,industry=0.1")

    s = load_settings()
    assert s.resend_api_key == "re_abc"
    assert s.data_path == "/tmp/mm.json"
    assert s.email_sandbox is False
    assert s.matching.threshold == 55
    assert s.matching.max_matches_per_mentee == 5
    assert (s.matching.weights.expertise, s.matching.weights.industry) == (0.5, 0.1)


def test_invalid_numbers_raise(monkeypatch):
    monkeypatch.setenv("MENTOR_MATCH_THRESHOLD", "high")
    with pytest.raises(ValueError):
        load_settings()


def test_parse_weights():
    weights = parse_weights("expertise=0.25, industry=0.25,availability=0.25,meeting-format=0.25")
    assert weights.meeting_format == 0.25

    with pytest.raises(ValueError):
        parse_weights("expertise")
    with pytest.raises(ValidationError):
        parse_weights("expertise=0.9")


def test_setup_logging_idempotent():
    logger1 = setup_logging(logging.DEBUG)
    logger2 = setup_logging(logging.DEBUG)
    assert logger1 is logger2
    assert logger1.name == "mentor_match"
    assert len(logger1.handlers) == 1
    assert logging.getLogger("httpx").level == logging.WARNING
