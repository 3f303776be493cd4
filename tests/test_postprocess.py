from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from caption_api.captions.postprocess import (
    PostProcessConfig,
    apply_negative_filters,
    as_clause,
    compose,
    normalize,
    process,
    truncate,
)


def test_scenario_filter_prefix_suffix() -> None:
    config = PostProcessConfig(
        prefix="TOK",
        suffix="high quality",
        negative_filters=("this image shows",),
    )

    result = process("This image shows a cat sitting on a mat.", config)

    assert result == "TOK, a cat sitting on a mat, high quality"


def test_phrase_filter_is_whole_word() -> None:
    config = PostProcessConfig(negative_filters=("there is a",))

    result = process("there is a cat, thereafter", config)

    assert result == "Cat, thereafter"
    assert apply_negative_filters("therefore is around", ["there is a"]) == "therefore is around"


def test_phrase_filter_is_case_insensitive_and_removes_every_occurrence() -> None:
    text = "THERE IS A dog and there is a ball"

    assert apply_negative_filters(text, ["there is a"]) == " dog and  ball"


def test_phrase_filter_matches_across_line_breaks() -> None:
    assert apply_negative_filters("there is\na cat", ["there is a"]) == " cat"


def test_phrase_filter_treats_phrase_literally() -> None:
    assert apply_negative_filters("axb and a.b", ["a.b"]) == "axb and "


def test_phrase_filters_apply_in_list_order() -> None:
    # "it appears" is gone before "appears to be" gets a chance to match
    text = "it appears to be a fox"

    assert apply_negative_filters(text, ["it appears", "appears to be"]) == " to be a fox"
    assert apply_negative_filters(text, ["appears to be", "it appears"]) == "it  a fox"


def test_blank_phrases_are_ignored() -> None:
    assert apply_negative_filters("a cat", ["", "   "]) == "a cat"


def test_no_orphan_separator_when_prefix_missing() -> None:
    result = process("a cat", PostProcessConfig(prefix="", suffix="high quality"))

    assert result == "A cat, high quality"
    assert ", , " not in result
    assert not result.startswith(", ")


def test_prefix_trailing_comma_and_suffix_leading_comma_are_dropped() -> None:
    config = PostProcessConfig(prefix="  TOK, ", suffix=" , best quality ")

    assert process("a cat", config) == "TOK, a cat, best quality"


def test_compose_without_prefix_or_suffix_is_body() -> None:
    assert compose("a cat") == "a cat"
    assert compose("a cat", prefix=",", suffix=",") == "a cat"


def test_empty_input_gives_empty_output() -> None:
    assert process("") == ""
    assert process(None) == ""
    assert process("  \n\n  ") == ""


def test_fully_filtered_caption_stays_empty_even_with_prefix() -> None:
    config = PostProcessConfig(prefix="TOK", suffix="hq", max_chars=10, negative_filters=("this image shows",))

    assert process("This image shows.", config) == ""


def test_newlines_collapse_and_trailing_period_is_stripped() -> None:
    # only the first letter is lowered then raised again; "Cat" keeps its case
    assert process("This is a Cat.\n\n") == "This is a Cat"
    assert process("a dog\n\nrunning   fast") == "A dog running fast"


def test_leading_acronym_is_flattened_behind_a_prefix() -> None:
    assert process("NASA rocket", PostProcessConfig(prefix="TOK")) == "TOK, nASA rocket"
    assert process("NASA rocket") == "NASA rocket"


def test_normalize_collapses_commas_and_strips_edges() -> None:
    assert normalize(", ,a,, b ,,") == "a, b"
    assert normalize("red,,,  blue") == "red, blue"
    assert normalize("\n  , cat , ") == "cat"


def test_as_clause_lowers_first_letter_and_strips_one_period() -> None:
    assert as_clause("Hello world.") == "hello world"
    assert as_clause("Wait..") == "wait."
    assert as_clause("") == ""


def test_comma_before_final_period_is_dropped() -> None:
    assert as_clause("A cat on a mat,.") == "a cat on a mat"
    assert process("A cat on a mat,.") == "A cat on a mat"
    assert process("A cat on a mat,.", PostProcessConfig(suffix="hq")) == "A cat on a mat, hq"


def test_truncate_cuts_at_word_boundary_when_close_to_budget() -> None:
    text = "a" * 42 + " " + "b" * 20

    assert truncate(text, 50) == "a" * 42


def test_truncate_keeps_hard_cut_when_boundary_too_far_back() -> None:
    text = "a" * 30 + " " + "b" * 40

    result = truncate(text, 50)

    assert result == text[:50]
    assert len(result) == 50


def test_truncate_boundary_at_exactly_eighty_percent_is_used() -> None:
    text = "a" * 40 + " " + "b" * 20

    assert truncate(text, 50) == "a" * 40


def test_truncate_never_ends_on_a_comma() -> None:
    text = "a" * 41 + ", " + "b" * 20

    assert truncate(text, 50) == "a" * 41


@pytest.mark.parametrize("text", ["short caption", "x" * 50, ""])
def test_truncate_is_noop_under_budget(text: str) -> None:
    assert truncate(text, 50) == text
    assert truncate(text, None) == text


def test_truncate_is_idempotent() -> None:
    text = "a" * 30 + " " + "b" * 40
    once = truncate(text, 50)

    assert truncate(once, 50) == once


def test_process_applies_limit_after_composition() -> None:
    config = PostProcessConfig(prefix="TOK", suffix="masterpiece", max_chars=20)

    result = process("a red fox in the snow", config)

    assert result == "TOK, a red fox in"
    assert len(result) <= 20


def test_config_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError):
        PostProcessConfig(max_chars=0)
    with pytest.raises(ValueError):
        PostProcessConfig(max_chars=-5)


def test_config_is_immutable_and_normalises_filters() -> None:
    config = PostProcessConfig(prefix=None, negative_filters=["we can see"])

    assert config.prefix == ""
    assert config.negative_filters == ("we can see",)
    with pytest.raises(FrozenInstanceError):
        config.prefix = "TOK"
