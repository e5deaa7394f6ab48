import pytest

from utils.formatters import mask_hint
from utils.text_similarity import is_exact_match, is_typo_match, matches_any, normalize_text


@pytest.mark.parametrize("text, expected", [
    ("Red Flavor", "red flavor"),
    ("Boy With Luv (feat. Halsey)", "boy with luv"),
    ("Rock & Roll", "rock and roll"),
    ("Hello!!  World", "hello world"),
    ("", ""),
])
def test_normalize_text(text, expected):
    assert normalize_text(text) == expected


def test_exact_match_ignores_case_spacing_and_punctuation():
    assert is_exact_match("ddu du ddu du", "DDU-DU DDU-DU")
    assert is_exact_match("fantasticbaby", "Fantastic Baby")
    assert not is_exact_match("fantastic", "Fantastic Baby")
    assert not is_exact_match("", "Fantastic Baby")


def test_typos_only_allowed_on_long_answers():
    assert is_typo_match("fantastik baby", "Fantastic Baby")
    assert not is_typo_match("ttt", "TT")
    assert is_typo_match("tt", "TT")


def test_matches_any_alias():
    answers = ["BIGBANG", "Big Bang", "빅뱅"]
    assert matches_any("big bang", answers)
    assert matches_any("빅뱅", answers)
    assert not matches_any("bts", answers)


def test_mask_hint_keeps_first_letters():
    assert mask_hint("Red Flavor") == "R__ F_____"
