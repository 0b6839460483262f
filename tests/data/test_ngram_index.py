"""Tests for the n-gram candidate index."""

import pytest

from xiv_helper.data import ItemRecord, NgramIndex


@pytest.fixture
def index():
    return NgramIndex.build(
        [
            ItemRecord(id=1, name="火"),
            ItemRecord(id=2, name="火焰"),
            ItemRecord(id=3, name="冰晶"),
            ItemRecord(id=4, name="火焰之劍"),
        ],
        n=2,
    )


def test_short_names_indexed_whole(index):
    assert index.postings("火") == frozenset({1})


def test_bigram_postings(index):
    assert index.postings("火焰") == frozenset({2, 4})
    assert index.postings("焰之") == frozenset({4})


def test_query_counts_shared_windows(index):
    assert index.query("火焰之") == {2: 1, 4: 2}


def test_short_query_matches_containing_windows(index):
    assert index.query("火") == {1: 1, 2: 1, 4: 1}


def test_candidates_ordered_by_overlap(index):
    assert index.candidates("火焰之") == [4, 2]


def test_no_match(index):
    assert index.query("") == {}
    assert index.query("水面") == {}


def test_invalid_size():
    with pytest.raises(ValueError):
        NgramIndex.build([], n=0)
