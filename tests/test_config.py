import pytest

from taskflow.core.config import Settings


def test_env_defaults_to_prod_without_stack_traces(monkeypatch):
    monkeypatch.delenv("ENV", raising=False)

    cfg = Settings(_env_file=None)

    assert cfg.env == "prod"
    assert cfg.is_dev is False


@pytest.mark.parametrize(("raw", "expected"), [("dev", True), (" DEV ", True), ("test", False), ("prod", False)])
def test_env_opt_in_to_dev(monkeypatch, raw, expected):
    monkeypatch.setenv("ENV", raw)

    assert Settings(_env_file=None).is_dev is expected


def test_unknown_env_is_rejected(monkeypatch):
    monkeypatch.setenv("ENV", "staging")

    with pytest.raises(ValueError, match="ENV must be one of"):
        Settings(_env_file=None)


def test_cors_origins_are_split(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")

    assert Settings(_env_file=None).cors_origins == ["http://a.test", "http://b.test"]
