"""Tests for scanning a word with a single rule."""
from __future__ import annotations

import pytest

from phonorules.applier import apply_rule, check_word
from phonorules.config import EngineConfig
from phonorules.errors import MalformedWordError
from phonorules.functions import delete_seg, metathesize
from phonorules.types import RuleSpec


def _coronal_dissimilation(direction=None) -> RuleSpec:
    return RuleSpec(
        direction=direction,
        where=lambda w: w[1].value("Coronal") is not None,
        do=lambda w: w[0].delink("Coronal"),
    )


def _coronals(word):
    return [i for i, seg in enumerate(word) if seg.value("Coronal") is not None]


def test_dissimilation_result_depends_on_direction(make_word):
    rightward = make_word("budini")
    leftward = make_word("budini")

    assert apply_rule(_coronal_dissimilation("rightward"), rightward) is True
    assert apply_rule(_coronal_dissimilation("leftward"), leftward) is True

    assert _coronals(rightward) == [5]
    assert _coronals(leftward) == [3, 5]


def test_rule_without_direction_uses_configured_default(make_word):
    word = make_word("budini")

    apply_rule(_coronal_dissimilation(), word, EngineConfig(default_direction="leftward"))

    assert _coronals(word) == [3, 5]


def test_domain_rule_only_reaches_the_end_of_each_run(make_word):
    word = make_word("dbadd")
    word[1].set("DOM", 1)
    for seg in word[2:4]:
        seg.set("DOM", word[1].value_ref("DOM"))
    rule = RuleSpec(
        domain="DOM",
        where=lambda w: w[1].is_boundary,
        do=lambda w: w[0].delink("voice"),
    )

    apply_rule(rule, word)

    assert [seg.value("voice") for seg in word] == [1, 1, 1, None, 1]


def test_segments_with_an_unset_domain_feature_are_outside_every_run(make_word):
    word = make_word("dbadd")
    word[1].set("DOM", 1)
    for seg in word[2:4]:
        seg.set("DOM", word[1].value_ref("DOM"))
    word[4].set("DOM", 0)
    rule = RuleSpec(
        domain="DOM",
        where=lambda w: w[1].is_boundary,
        do=lambda w: w[0].delink("voice"),
    )

    apply_rule(rule, word)

    assert "DOM" not in word[4]
    assert [seg.value("voice") for seg in word] == [1, 1, 1, None, 1]


def test_tier_rule_spreads_across_intervening_segments(make_word):
    leftward = make_word("akiktu")
    rightward = make_word("akiktu")

    def spread_labial(direction):
        return RuleSpec(
            tier="vocoid",
            direction=direction,
            where=lambda w: w[1].value("labial") is not None,
            do=lambda w: w[0].set("labial", 1),
        )

    apply_rule(spread_labial("leftward"), leftward)
    apply_rule(spread_labial("rightward"), rightward)

    assert [seg.value("labial") for seg in leftward] == [1, None, 1, None, None, 1]
    assert [seg.value("labial") for seg in rightward] == [None, None, 1, None, None, 1]


def test_tier_linked_segments_are_changed_together(make_word):
    word = make_word("atau")
    word[2].set("ROOT", word[0].value_ref("ROOT"))
    seen = []

    def spread(w):
        seen.append(len(w))
        return w[1].value("labial") is not None

    rule = RuleSpec(
        tier="vocoid",
        direction="leftward",
        where=spread,
        do=lambda w: w[0].set("labial", 1),
    )

    apply_rule(rule, word)

    assert seen == [2, 2]
    assert word[0].value("labial") == 1
    assert word[2].value("labial") == 1
    assert word[1].value("labial") is None


def test_inserted_segments_are_spliced_in_and_visited(make_word, make_segment):
    word = make_word("bkto")
    original = list(word)
    visited = []

    def between_consonants(w):
        visited.append(w[0].wrapped)
        return (
            w[0].value("vocoid") is None
            and not w[1].is_boundary
            and w[1].value("vocoid") is None
        )

    rule = RuleSpec(where=between_consonants, do=lambda w: w[0].insert_after(make_segment("@")))

    apply_rule(rule, word)

    assert len(word) == 6
    assert [seg.value("vocoid") for seg in word] == [None, 1, None, 1, None, 1]
    assert [word[0], word[2], word[4], word[5]] == original
    assert visited == word


def test_insertion_before_the_focus_is_not_revisited(make_word, make_segment):
    word = make_word("ta")
    calls = []

    def epenthesis(w):
        calls.append(w.index)
        w[0].insert_before(make_segment("@"))

    rule = RuleSpec(where=lambda w: w[0].value("vocoid") is None, do=epenthesis)

    apply_rule(rule, word)

    assert calls == [0]
    assert [seg.value("aperture") for seg in word] == [2, None, 3]


def test_deleted_segments_leave_the_scan_and_the_word(make_word):
    for direction in ("rightward", "leftward"):
        word = make_word("anda")
        kept = [word[0], word[2], word[3]]
        visited = []

        def nasal(w):
            visited.append(w[0].wrapped)
            return w[0].value("nasal") is not None

        rule = RuleSpec(direction=direction, where=nasal, do=lambda w: delete_seg(w[0]))

        apply_rule(rule, word)

        assert word == kept
        assert len(visited) == 4


def test_cleared_segments_can_be_kept(make_word):
    word = make_word("anda")
    rule = RuleSpec(where=lambda w: w[0].value("nasal") is not None, do=lambda w: w[0].clear())

    apply_rule(rule, word, EngineConfig(drop_empty_segments=False))

    assert len(word) == 4
    assert word[1].all_values() == {}


def test_metathesis_rightward_moves_a_copy_of_the_second_segment(make_word):
    word = make_word("asko")
    a, s, k, o = word
    rule = RuleSpec(
        where=lambda w: w[0].value("continuant") is not None and w[1].value("dorsal") is not None,
        do=lambda w: metathesize(w[0], w[1]),
    )

    apply_rule(rule, word)

    assert len(word) == 4
    assert word[0] is a and word[2] is s and word[3] is o
    assert word[1] is not k
    assert word[1].all_values() == {"dorsal": 1}


def test_metathesis_leftward_moves_a_copy_of_the_first_segment(make_word):
    word = make_word("asko")
    a, s, k, o = word
    rule = RuleSpec(
        direction="leftward",
        where=lambda w: w[0].value("continuant") is not None and w[1].value("dorsal") is not None,
        do=lambda w: metathesize(w[0], w[1]),
    )

    apply_rule(rule, word)

    assert len(word) == 4
    assert word[0] is a and word[1] is k and word[3] is o
    assert word[2] is not s
    assert word[2].all_values() == {"anterior": 1, "continuant": 1}


def test_filter_hides_segments_from_the_window(make_word):
    word = make_word("dad")
    rule = RuleSpec(
        filter=lambda s: s.value("vocoid") is None,
        where=lambda w: not w[1].is_boundary,
        do=lambda w: w[1].delink("voice"),
    )

    apply_rule(rule, word)

    assert [seg.value("voice") for seg in word] == [1, 1, None]


def test_rule_segments_expose_rule_and_direction(make_word):
    word = make_word("ba")
    seen = []
    rule = RuleSpec(direction="leftward", do=lambda w: seen.append((w[0].rule, w[0].direction)))

    apply_rule(rule, word)

    assert seen == [(rule, "leftward"), (rule, "leftward")]


def test_nested_application_does_not_see_outer_insertions(make_word, make_segment):
    word = make_word("ba")
    seen = []
    inner = RuleSpec(do=lambda w: seen.append(w[0].insert_after()))

    def outer_action(w):
        w[0].insert_after(make_segment("@"))
        apply_rule(inner, word)

    apply_rule(RuleSpec(where=lambda w: w.index == 0, do=outer_action), word)

    assert seen == [None, None]
    assert len(word) == 3
    assert word[1].value("aperture") == 2


def test_callback_errors_propagate(make_word):
    def broken(w):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        apply_rule(RuleSpec(where=broken), make_word("ba"))


@pytest.mark.parametrize("word", [[], "bad", None, ["not a segment"]])
def test_check_word_rejects_malformed_words(word):
    with pytest.raises(MalformedWordError):
        check_word(word)
