import pytest

from neoaura.utils.strings import gerund, to_str, truncate


def test_to_str():
    assert to_str(b"running") == "running"
    assert to_str("running") == "running"
    assert to_str(b"\xff", errors="replace") == "�"


def test_truncate():
    assert truncate("foobar", 3) == "foo..."
    assert truncate("foo", 3) == "foo"
    assert truncate(None) == ""


@pytest.mark.parametrize(
    "verb, expected",
    [("pause", "pausing"), ("resume", "resuming"), ("update", "updating"), ("rename", "renaming"), ("see", "seeing")],
)
def test_gerund(verb, expected):
    assert gerund(verb) == expected
