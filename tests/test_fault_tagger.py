# tests/test_fault_tagger.py
"""
Unit tests for fault tagging.

Run:
    pytest tests/test_fault_tagger.py -v
"""

from repair_core.fault_tagger import is_covered, tag_faults
from repair_core.vocabulary import KIND_FAULT, ManagedVocabulary


DESCRIPTIONS = [
    "北館B區廁所馬桶堵塞",
    "南館中庭燈管不亮",
    "水龍頭漏水",
    "冷氣異音",
    "",
]


def test_tags_in_vocabulary_order():
    assert tag_faults("廁所堵塞且漏水", ["漏水", "堵塞"]) == ["漏水", "堵塞"]


def test_case_insensitive():
    assert tag_faults("LED燈閃爍", ["led燈"]) == ["led燈"]


def test_unclassified_sentinel():
    assert tag_faults("冷氣異音", ["漏水"]) == ["未分類故障"]
    assert tag_faults("", ["漏水"]) == []
    assert tag_faults(None, []) == []


def test_accepts_managed_entries():
    vocab = ManagedVocabulary(KIND_FAULT, ["堵塞"])
    assert tag_faults("馬桶堵塞", vocab.entries) == ["堵塞"]
    assert is_covered("馬桶堵塞", vocab.entries)
    assert not is_covered("燈不亮", vocab.entries)


def test_monotonic_in_vocabulary():
    """Growing the vocabulary never moves a description back to unclassified"""
    small = ["堵塞"]
    large = ["堵塞", "漏水", "不亮"]
    for d in DESCRIPTIONS:
        before = tag_faults(d, small)
        after = tag_faults(d, large)
        if before and before != ["未分類故障"]:
            assert after != ["未分類故障"]
            assert set(before) <= set(after)
