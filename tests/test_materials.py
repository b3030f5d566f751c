# tests/test_materials.py
"""
Unit tests for the material extraction pipeline.

Run:
    pytest tests/test_materials.py -v
"""

import pytest

from repair_core.cleaning import clean_segments, split_segments, strip_affixes
from repair_core.materials import (
    MaterialUsage,
    extract_materials,
    is_incomplete_prefix,
    longest_first,
    match_managed_name,
)
from repair_core.vocabulary import KIND_MATERIAL, ManagedVocabulary


def _names(extraction):
    return {m.name: m.quantity for m in extraction.materials_used}


# ============================================================
# TEST: CLEANING
# ============================================================

def test_segmentation_strips_leading_verb():
    assert clean_segments("更換龍頭及閥") == ["龍頭", "閥"]


def test_segmentation_keeps_each_quantifier():
    assert split_segments("螺絲及各2個") == ["螺絲及各2個"]
    assert len(split_segments("螺絲、螺帽&墊片以及膠帶與水管")) == 5


@pytest.mark.parametrize("segment,expected", [
    ("更換水龍頭2個測試正常。", "水龍頭2個"),
    ("已更換燈管完成", "燈管"),
    ("更換了開關", "開關"),
    ("使用矽利康等材料修復", "矽利康"),
    ("水管將其重新配管", "水管"),
    ("插座.", "插座"),
    ("   ", ""),
])
def test_strip_affixes(segment, expected):
    assert strip_affixes(segment) == expected


def test_duplicated_phrase_repaired():
    assert clean_segments("更換RO管更換RO管") == ["RO管"]


# ============================================================
# TEST: MATCHING
# ============================================================

def test_longest_first_is_deterministic():
    assert longest_first(["閥", "球閥", "Ab", "aa"]) == ["aa", "Ab", "球閥", "閥"]
    assert longest_first(["b", "a"]) == longest_first(["a", "b"])


def test_prefix_with_benign_remainder_keeps_own_wording():
    names = longest_first(["水龍頭"])
    assert match_managed_name('水龍頭-1/2"', names, {"水龍頭"}) == '水龍頭-1/2"'


def test_substring_match_returns_canonical_name():
    names = longest_first(["馬桶"])
    assert match_managed_name("兩件式馬桶", names, {"馬桶"}) == "馬桶"
    assert match_managed_name("水箱", names, {"馬桶"}) is None


def test_incomplete_prefix_pattern():
    assert is_incomplete_prefix("LED燈泡-")
    assert is_incomplete_prefix("led燈泡-")
    assert not is_incomplete_prefix("LED燈泡-E27")
    assert not is_incomplete_prefix("LED燈泡")


# ============================================================
# TEST: EXTRACTION
# ============================================================

def test_quantities_aggregate_by_name():
    result = extract_materials("更換螺絲*3、螺絲*2", ["螺絲"])
    assert result.materials_used == [MaterialUsage("螺絲", 5)]
    assert result.uncategorized == []


def test_model_code_keeps_quantity_one():
    result = extract_materials("更換T12燈管", ["T12燈管"])
    assert result.materials_used == [MaterialUsage("T12燈管", 1)]


def test_two_fragments_two_materials():
    result = extract_materials("更換龍頭及閥", ["龍頭", "閥"])
    assert _names(result) == {"龍頭": 1, "閥": 1}


def test_incomplete_prefix_goes_to_uncategorized():
    result = extract_materials("更換LED燈泡-", ["LED燈泡"])
    assert result.materials_used == []
    assert result.uncategorized == ["LED燈泡-"]


def test_incomplete_prefix_accepted_when_exactly_managed():
    result = extract_materials("更換LED燈泡-", ["LED燈泡-"])
    assert _names(result) == {"LED燈泡-": 1}


def test_hose_wire_compound_split():
    narrative = 'PT高壓軟管-½"白扁線-2.0mm*2C'
    result = extract_materials(narrative, ['PT高壓軟管-½"'])
    assert _names(result) == {'PT高壓軟管-½"': 1}
    assert result.uncategorized == ["白扁線-2.0mm*2C"]

    both = extract_materials(narrative, ['PT高壓軟管-½"', "白扁線-2.0mm*2C"])
    assert _names(both) == {'PT高壓軟管-½"': 1, "白扁線-2.0mm*2C": 1}
    assert both.uncategorized == []


def test_toilet_quantity_corrected():
    result = extract_materials("更換兩件式馬桶2組", ["兩件式馬桶"])
    assert _names(result) == {"兩件式馬桶": 1}


def test_toilet_quantity_kept_when_mentioned_twice():
    result = extract_materials("更換兩件式馬桶、兩件式馬桶", ["兩件式馬桶"])
    assert _names(result) == {"兩件式馬桶": 2}


def test_duplicated_phrase_counts_once():
    result = extract_materials("更換RO管更換RO管", ["RO管"])
    assert _names(result) == {"RO管": 1}


def test_unmatched_fragment_kept_verbatim():
    result = extract_materials("更換燈管2支、清潔濾網", ["燈管"])
    assert _names(result) == {"燈管": 2}
    assert result.uncategorized == ["濾網"]


def test_accepts_managed_entries():
    vocab = ManagedVocabulary(KIND_MATERIAL, ["水龍頭"])
    result = extract_materials("更換水龍頭2個", vocab.entries)
    assert _names(result) == {"水龍頭": 2}


@pytest.mark.parametrize("narrative", [None, "", "   ", 42, "、、、"])
def test_extraction_is_total(narrative):
    result = extract_materials(narrative, ["螺絲"])
    assert result.materials_used == []
    assert result.uncategorized == []
