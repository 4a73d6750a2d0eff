from __future__ import annotations

from core.titles import extract_title


def test_entities_unescaped_and_whitespace_collapsed() -> None:
    assert extract_title("<html><title>  Foo &amp; Bar  </title></html>") == "Foo & Bar"
    assert extract_title("<title>\n\tMulti\n   line\ttitle\n</title>") == "Multi line title"


def test_first_title_wins() -> None:
    markup = "<html><head><title>One</title></head><body><title>Two</title></body></html>"
    assert extract_title(markup) == "One"


def test_missing_or_empty_title_is_absent() -> None:
    assert extract_title("<html><body>no title</body></html>") is None
    assert extract_title("<title>   </title>") is None


def test_truncated_or_broken_markup_degrades() -> None:
    assert extract_title("<html><head><title>cut off mid") in (None, "cut off mid")


def test_undecodable_title_is_rejected() -> None:
    assert extract_title("<title>\udcff\udcfe</title>") is None


def test_control_characters_are_dropped() -> None:
    assert extract_title("<title>\x01ACTION pwned\x01</title>") == "ACTION pwned"
    assert extract_title("<title>\x02bold\x02 \x0304red\x03 x\x7fy</title>") == "bold 04red xy"
    assert extract_title("<title>a\x1fb</title>") == "a b"


def test_title_of_only_control_characters_is_absent() -> None:
    assert extract_title("<title>\x01\x03\x02</title>") is None
