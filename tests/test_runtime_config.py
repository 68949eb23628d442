import pytest

from platescan import runtime_config


@pytest.fixture(autouse=True)
def _fresh_config():
    runtime_config.clear()
    yield
    runtime_config.clear()


def test_set_then_get():
    runtime_config.set_value("LprDatFile", "/tmp/lpr.lprdat")
    assert runtime_config.get_value("LprDatFile") == "/tmp/lpr.lprdat"


def test_missing_key_gives_none():
    assert runtime_config.get_value("absent") is None


def test_overwrite_replaces_value():
    runtime_config.set_value("size", 32)
    runtime_config.set_value("size", 128)
    assert runtime_config.get_value("size") == 128


def test_lookup_does_not_replace_existing_value():
    runtime_config.set_value("flag", True)
    runtime_config.get_value("other")
    assert runtime_config.get_value("flag") is True


def test_clear_removes_values():
    runtime_config.set_value("key", 1)
    runtime_config.clear()
    assert runtime_config.get_value("key") is None