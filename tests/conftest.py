# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the Zodika suite.

- Registers Hypothesis profiles for local dev and CI.
- Points config at a non-existent file so tests run on built-in defaults.
- Provides a small in-memory text corpus and a Flask test client wired to it.
"""

import os
import pytest
from hypothesis import settings, HealthCheck


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,
        max_examples=60,
        suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=200,
        suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "api: Flask test-client tests")


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Global fixtures
# ──────────────────────────────────────────────────────────────────────────────

_ZODIKA_ENV = (
    "ZODIKA_CONFIG", "ZODIKA_ORB_TABLE", "ZODIKA_LANG",
    "ZODIKA_TEXTS", "ZODIKA_TEXTS_PT", "ZODIKA_REPORT_LIMIT",
)


@pytest.fixture(autouse=True)
def clean_zodika_env(monkeypatch, tmp_path):
    """Every test starts from built-in defaults unless it sets env itself."""
    for name in _ZODIKA_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ZODIKA_CONFIG", str(tmp_path / "absent.yaml"))


SAMPLE_CORPUS = {
    "moon|sun": {
        "conjunction": "Feeling and will move together.",
        "opposition": "Reason and emotion pull apart.",
        "square": "Will and feeling rub against each other.",
        "trine": "Emotion and reason are in harmony.",
        "sextil": "Feeling and action integrate easily.",
    },
    "mars|venus": {
        "conjunction": "Desire and affection join forces.",
        "square": "Passion and impatience mix.",
    },
    "sun|venus": {
        "trine": "Will and affection are balanced.",
        "square": "   ",
    },
    "moon|saturn": {
        "square": "Emotional reserve asks for patience.",
    },
}


@pytest.fixture
def corpus():
    return {k: dict(v) for k, v in SAMPLE_CORPUS.items()}


@pytest.fixture
def resolver(corpus):
    from zodika.core.texts import TextResolver
    return TextResolver(corpus)


@pytest.fixture
def app(resolver):
    from zodika.main import create_app
    from zodika.utils.config import load_config
    a = create_app(load_config(), resolver=resolver)
    a.testing = True
    return a


@pytest.fixture
def client(app):
    return app.test_client()


def _pair(name1, name2, house1=None, house2=None, **extra):
    p1 = {"name": name1}
    p2 = {"name": name2}
    if house1 is not None:
        p1["house"] = house1
    if house2 is not None:
        p2["house"] = house2
    p1.update(extra.get("p1", {}))
    p2.update(extra.get("p2", {}))
    return {"planet1": p1, "planet2": p2}


@pytest.fixture
def pair():
    """Builder for pre-tagged pair records in the wire shape."""
    return _pair
