"""Tests for the filtered/tiered/domained view a rule scans."""
from __future__ import annotations

from phonorules.segment import BOUNDARY
from phonorules.types import RuleSpec
from phonorules.view import TierGroup, Window, build_view, partition_by_link


def test_view_without_tier_or_domain_is_the_whole_word(make_word):
    word = make_word("bad")

    runs = build_view(word, RuleSpec())

    assert len(runs) == 1
    assert [s is w for s, w in zip(runs[0], word)] == [True, True, True]


def test_filter_runs_before_tier(make_word):
    word = make_word("bausi")
    rule = RuleSpec(filter=lambda s: s.value("aperture") != 1, tier="vocoid")

    (run,) = build_view(word, rule)

    assert run == [word[1]]


def test_empty_segments_are_skipped(make_word):
    word = make_word("bad")
    word[1].clear()

    (run,) = build_view(word, RuleSpec())

    assert run == [word[0], word[2]]


def test_tier_skips_segments_without_the_feature(make_word):
    word = make_word("bulkti")

    (run,) = build_view(word, RuleSpec(tier="vocoid"))

    assert run == [word[1], word[5]]


def test_tier_merges_consecutive_linked_segments(make_word):
    word = make_word("aktu")
    word[3].set("vocoid", word[0].value_ref("vocoid"))

    (run,) = build_view(word, RuleSpec(tier="vocoid"))

    assert len(run) == 1
    assert isinstance(run[0], TierGroup)
    assert run[0].members == [word[0], word[3]]


def test_domain_splits_into_runs_and_excludes_outsiders(make_word):
    word = make_word("pbardam")
    for start, end in ((1, 4), (4, 7)):
        word[start].set("DOM", 1)
        for seg in word[start + 1 : end]:
            seg.set("DOM", word[start].value_ref("DOM"))

    runs = build_view(word, RuleSpec(domain="DOM"))

    assert runs == [word[1:4], word[4:7]]


def test_domains_are_cut_before_tier_merging(make_word):
    word = make_word("aa")
    word[1].set("vocoid", word[0].value_ref("vocoid"))
    word[0].set("DOM", 1)
    word[1].set("DOM", 1)

    runs = build_view(word, RuleSpec(tier="vocoid", domain="DOM"))

    assert runs == [[word[0]], [word[1]]]


def test_partition_by_link_uses_storage_identity(make_word):
    word = make_word("bab")
    for seg in word:
        seg.set("DOM", 1)

    assert partition_by_link(word, "DOM") == [[word[0]], [word[1]], [word[2]]]


def test_tier_group_reads_agreement_and_writes_everywhere(make_word):
    word = make_word("ai")
    group = TierGroup(word)

    assert group.value("vocoid") == 1
    assert group.value("aperture") is None
    group.set("labial", 1)
    assert all(seg.value("labial") == 1 for seg in word)
    group.delink("voice")
    assert all(seg.value("voice") is None for seg in word)


def test_window_offsets_are_positional_and_bounded(make_word):
    items = make_word("bad")
    window = Window(items, 0, "leftward")

    assert window[0] is items[0]
    assert window[1] is items[1]
    assert window[-1] is BOUNDARY
    assert window[5] is BOUNDARY
    assert window.ahead() is BOUNDARY
    assert window.behind() is items[1]

    rightward = Window(items, 1, "rightward")
    assert rightward.ahead() is items[2]
    assert rightward.behind() is items[0]
    assert rightward.current is items[1]
    assert len(rightward) == 3
