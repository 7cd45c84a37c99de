# tests/conftest.py
import pytest

from helpers import SAMPLE_HTML, FakeFallback, FakeSession


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def fake_fallback():
    return FakeFallback()
