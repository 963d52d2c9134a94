import logging

import pytest

from notifier.core.exceptions import ConfigurationError
from notifier.core.logging import configure_logging
from notifier.settings.base import Settings
from notifier.settings.prod import ProdSettings
from notifier.utils.formatting import describe, format_args


def test_defaults_are_valid(monkeypatch):
    for name in (
        "NOTIFIER_RECURSIVE_RULE",
        "NOTIFIER_DUPLICATE_POLICY",
        "NOTIFIER_DEFAULT_EMITTER",
        "NOTIFIER_REPLAY",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.recursive_rule == "warn"
    assert settings.duplicate_policy == "return"
    assert settings.default_emitter == "serial"
    assert settings.replay is False
    assert settings.validate() == {}


def test_invalid_values_are_reported(monkeypatch):
    monkeypatch.setenv("NOTIFIER_RECURSIVE_RULE", "loud")
    monkeypatch.setenv("NOTIFIER_DUPLICATE_POLICY", "twice")
    monkeypatch.setenv("NOTIFIER_DEFAULT_EMITTER", "parallel")
    errors = Settings().validate()
    assert set(errors) == {"recursive_rule", "duplicate_policy", "default_emitter"}


def test_replay_flag(monkeypatch):
    monkeypatch.setenv("NOTIFIER_REPLAY", "yes")
    assert Settings().replay is True


def test_prod_never_raises_on_recursion(monkeypatch):
    monkeypatch.setenv("NOTIFIER_RECURSIVE_RULE", "error")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    settings = ProdSettings()
    assert settings.environment == "prod"
    assert settings.recursive_rule == "warn"
    assert settings.log_level == "WARNING"


def test_configure_logging_sets_notifier_level():
    root = logging.getLogger()
    package = logging.getLogger("notifier")
    previous = (root.level, package.level)
    try:
        logger = configure_logging("debug")
        assert logger is package
        assert logger.name == "notifier"
        assert logger.level == logging.DEBUG
        assert root.level == logging.WARNING
        assert logging.getLogger("notifier.core.signals").isEnabledFor(logging.DEBUG)
    finally:
        root.setLevel(previous[0])
        package.setLevel(previous[1])


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ConfigurationError):
        configure_logging("chatty")


def test_describe():
    def on_event():
        pass

    assert describe(on_event).startswith(__name__)
    assert describe(on_event).endswith("on_event")


def test_format_args_truncates():
    assert format_args((1, "a")) == "(1, 'a')"
    text = format_args(("x" * 500,), limit=40)
    assert len(text) == 40
    assert text.endswith("...)")
