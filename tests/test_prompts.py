"""Tests for prompt sets and verdict classification."""

import pytest

from llm_refine.refine.prompts import FORWARD, PROMPT_SETS, REVERSE
from llm_refine.refine.types import Verdict


@pytest.mark.parametrize(
    ("reply", "verdict"),
    [
        ("First result is better.", Verdict.ORIGINAL_BETTER),
        ("First result is better. ", Verdict.ORIGINAL_BETTER),
        ("\n  First result is better.\n", Verdict.ORIGINAL_BETTER),
        ("The second implementation is better.", Verdict.CANDIDATE_BETTER),
        ("first result is better.", Verdict.AMBIGUOUS),
        ("First result is better", Verdict.AMBIGUOUS),
        ("Both are equally good.", Verdict.AMBIGUOUS),
        ("", Verdict.AMBIGUOUS),
    ],
)
def test_forward_classification_is_exact(reply, verdict):
    assert FORWARD.classify(reply).verdict == verdict


def test_reverse_uses_its_own_sentences():
    assert REVERSE.classify("First specification is better.").verdict == Verdict.ORIGINAL_BETTER
    assert REVERSE.classify("The second spec is better.").verdict == Verdict.CANDIDATE_BETTER
    assert REVERSE.classify("First result is better.").verdict == Verdict.AMBIGUOUS


def test_classify_keeps_trimmed_reply():
    judgment = FORWARD.classify("  maybe?  ")
    assert judgment.reply == "maybe?"


def test_bootstrap_embeds_source():
    prompt = FORWARD.bootstrap("build a parser")
    assert prompt.endswith("build a parser")


def test_refine_without_diagnostics_has_no_error_section():
    prompt = FORWARD.refine("desc", "fn main() {}")
    assert "<result-specimen>\nfn main() {}\n</result-specimen>" in prompt
    assert "<compiler-errors>" not in prompt


def test_refine_with_empty_diagnostics_still_has_section():
    prompt = FORWARD.refine("desc", "code", [])
    assert "<compiler-errors>\n\n</compiler-errors>" in prompt


def test_refine_joins_diagnostics():
    prompt = FORWARD.refine("desc", "code", ["e1", "e2"])
    assert "<compiler-errors>\ne1\ne2\n</compiler-errors>" in prompt


def test_evaluate_names_both_sentences():
    prompt = FORWARD.evaluate("desc", "one", "two")
    assert "'First result is better.'" in prompt
    assert "'The second implementation is better.'" in prompt
    assert "<first-result>\none\n</first-result>" in prompt
    assert "<second-result>\ntwo\n</second-result>" in prompt
    assert "compile-errors" not in prompt


def test_evaluate_with_diagnostics():
    prompt = FORWARD.evaluate("desc", "one", "two", ["bad"], [])
    assert "<first-compile-errors>\nbad\n</first-compile-errors>" in prompt
    assert "<second-compile-errors>\n\n</second-compile-errors>" in prompt


def test_braces_in_content_are_not_formatted():
    prompt = FORWARD.refine("{source}", "{x: 1}")
    assert "{x: 1}" in prompt


def test_prompt_sets_registry():
    assert PROMPT_SETS == {"forward": FORWARD, "reverse": REVERSE}
