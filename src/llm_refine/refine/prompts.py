"""Prompt sets: what the generator and judge are asked, and how replies are read."""

from __future__ import annotations

from dataclasses import dataclass

from llm_refine.refine.types import Judgment, Verdict


@dataclass(frozen=True)
class PromptSet:
    """Templates for one refinement direction plus its two verdict sentences.

    Templates use ``str.format`` placeholders: ``source`` (the loaded
    input), ``specimen`` (current artifact), ``first``/``second`` (the two
    versions under comparison), ``*_errors`` (joined diagnostics) and
    ``first_phrase``/``second_phrase``.
    """

    name: str
    bootstrap_template: str
    refine_template: str
    refine_with_diagnostics_template: str
    evaluate_template: str
    evaluate_with_diagnostics_template: str
    original_better: str
    candidate_better: str

    def bootstrap(self, source: str) -> str:
        return self.bootstrap_template.format(source=source)

    def refine(self, source: str, specimen: str, diagnostics: list[str] | None = None) -> str:
        """Refinement prompt; diagnostics are included whenever a verifier ran."""
        if diagnostics is None:
            return self.refine_template.format(source=source, specimen=specimen)
        return self.refine_with_diagnostics_template.format(
            source=source, specimen=specimen, errors="\n".join(diagnostics)
        )

    def evaluate(
        self,
        source: str,
        first: str,
        second: str,
        first_diagnostics: list[str] | None = None,
        second_diagnostics: list[str] | None = None,
    ) -> str:
        fields = {
            "source": source,
            "first": first,
            "second": second,
            "first_phrase": self.original_better,
            "second_phrase": self.candidate_better,
        }
        if first_diagnostics is None and second_diagnostics is None:
            return self.evaluate_template.format(**fields)
        return self.evaluate_with_diagnostics_template.format(
            first_errors="\n".join(first_diagnostics or []),
            second_errors="\n".join(second_diagnostics or []),
            **fields,
        )

    def classify(self, reply: str) -> Judgment:
        """Map a judge reply onto a :class:`Verdict`.

        Only surrounding whitespace is forgiven; case and punctuation must
        match the sentence exactly.
        """
        trimmed = reply.strip()
        if trimmed == self.original_better:
            return Judgment(Verdict.ORIGINAL_BETTER, trimmed)
        if trimmed == self.candidate_better:
            return Judgment(Verdict.CANDIDATE_BETTER, trimmed)
        return Judgment(Verdict.AMBIGUOUS, trimmed)


# ---------------------------------------------------------------------------
# Description -> implementation
# ---------------------------------------------------------------------------

_ANSWER_RULE = (
    "Then, if the first result is better, output the phrase '{first_phrase}', "
    "if the second result is better, output the phrase '{second_phrase}'. "
    "Output only one of the two phrases, and NOTHING else - not your thoughts, not analysis."
)

FORWARD = PromptSet(
    name="forward",
    bootstrap_template=(
        "Please produce single output result, which would match the description below "
        "as well as you can:\n\n{source}"
    ),
    refine_template=(
        "Please verify that the description below (enclosed into "
        "<result-description></result-description>) matches the specimen (enclosed into "
        "<result-specimen></result-specimen>) as much as possible. If it does - then simply "
        "output the content of the result-specimen verbatim. If you find that there are "
        "imperfections in how result-specimen fulfills its purpose described in "
        "result-description, then improve it and output the full result, with your "
        "improvements, BUT without any side comments/observations. Do not delimit the result "
        "with anything, output it verbatim.\n\n"
        "<result-description>\n{source}\n</result-description>\n\n"
        "<result-specimen>\n{specimen}\n</result-specimen>"
    ),
    refine_with_diagnostics_template=(
        "Please verify that the description below (enclosed into "
        "<result-description></result-description>) matches the specimen (enclosed into "
        "<result-specimen></result-specimen>) as much as possible, taking into account the "
        "possible presence of compiler errors (enclosed into <compiler-errors></compiler-errors>). "
        "If it does - then simply output the content of the result-specimen verbatim. If you "
        "find that there are imperfections in how result-specimen fulfills its purpose "
        "described in result-description, then improve it and output the full result, with "
        "your improvements, BUT without any side comments/observations. Do not delimit the "
        "result with anything, output it verbatim.\n\n"
        "<result-description>\n{source}\n</result-description>\n\n"
        "<result-specimen>\n{specimen}\n</result-specimen>\n\n"
        "<compiler-errors>\n{errors}\n</compiler-errors>"
    ),
    evaluate_template=(
        "Please CAREFULLY evaluate the below description (enclosed into "
        "<result-description></result-description>), and two outputs corresponding to this "
        'description, first one enclosed into "<first-result></first-result>" and the second '
        'enclosed into "<second-result></second-result>", and evaluate which of the two is '
        "more precise and correct in implementing the description. " + _ANSWER_RULE + "\n\n"
        "<result-description>\n{source}\n</result-description>\n\n"
        "<first-result>\n{first}\n</first-result>\n\n"
        "<second-result>\n{second}\n</second-result>"
    ),
    evaluate_with_diagnostics_template=(
        "Please CAREFULLY evaluate the below description (enclosed into "
        "<result-description></result-description>), and two outputs corresponding to this "
        'description, first one enclosed into "<first-result></first-result>" and the second '
        'enclosed into "<second-result></second-result>", with compile errors of first result '
        'included into "<first-compile-errors></first-compile-errors>" and second compile '
        'errors as "<second-compile-errors></second-compile-errors>", and evaluate which of '
        "the two is more precise and correct in implementing the description - and also which "
        "of them compiles! " + _ANSWER_RULE + "\n\n"
        "<result-description>\n{source}\n</result-description>\n\n"
        "<first-result>\n{first}\n</first-result>\n\n"
        "<second-result>\n{second}\n</second-result>\n\n"
        "<first-compile-errors>\n{first_errors}\n</first-compile-errors>\n\n"
        "<second-compile-errors>\n{second_errors}\n</second-compile-errors>"
    ),
    original_better="First result is better.",
    candidate_better="The second implementation is better.",
)


# ---------------------------------------------------------------------------
# Implementation -> specification
# ---------------------------------------------------------------------------

_SPEC_ANSWER_RULE = (
    "Then, if the first specification is better, output the phrase '{first_phrase}', "
    "if the second specification is better, output the phrase '{second_phrase}'. "
    "Output only one of the two phrases, and nothing else"
)

REVERSE = PromptSet(
    name="reverse",
    bootstrap_template=(
        "Please produce a detailed specification which will allow to recreate the "
        "implementation below from first principles:\n{source}"
    ),
    refine_template=(
        "Please verify that the implementation below (enclosed into "
        "<result-specimen></result-specimen>) is accurately described by the specification "
        "(enclosed into <result-specification></result-specification>) as much as possible. "
        "If it does - then simply output the content of the result-specification verbatim. "
        "If you find that there are imperfections in how result-specification describes the "
        "specimen, then incrementally improve it and output the full result, with your "
        "improvements, BUT without any side comments/observations. Do not delimit the result "
        "with anything, output it verbatim.\n\n"
        "<result-specimen>\n{source}\n</result-specimen>\n\n"
        "<result-specification>\n{specimen}\n</result-specification>"
    ),
    refine_with_diagnostics_template=(
        "Please verify that the implementation below (enclosed into "
        "<result-specimen></result-specimen>) is accurately described by the specification "
        "(enclosed into <result-specification></result-specification>) as much as possible, "
        "taking into account the findings of the checker (enclosed into "
        "<checker-findings></checker-findings>). If it does - then simply output the content "
        "of the result-specification verbatim. Otherwise incrementally improve it and output "
        "the full result, with your improvements, BUT without any side comments/observations. "
        "Do not delimit the result with anything, output it verbatim.\n\n"
        "<result-specimen>\n{source}\n</result-specimen>\n\n"
        "<result-specification>\n{specimen}\n</result-specification>\n\n"
        "<checker-findings>\n{errors}\n</checker-findings>"
    ),
    evaluate_template=(
        "Please CAREFULLY evaluate the below specimen (enclosed into "
        "<result-specimen></result-specimen>), and two outputs corresponding to this "
        'description, first one enclosed into "<first-specification></first-specification>" '
        'and the second enclosed into "<second-specification></second-specification>", and '
        "evaluate which of the two is more precise and correct in describing the specimen. "
        + _SPEC_ANSWER_RULE + "\n\n"
        "<result-specimen>\n{source}\n</result-specimen>\n\n"
        "<first-specification>\n{first}\n</first-specification>\n\n"
        "<second-specification>\n{second}\n</second-specification>"
    ),
    evaluate_with_diagnostics_template=(
        "Please CAREFULLY evaluate the below specimen (enclosed into "
        "<result-specimen></result-specimen>), and two outputs corresponding to this "
        'description, first one enclosed into "<first-specification></first-specification>" '
        'and the second enclosed into "<second-specification></second-specification>", with '
        'checker findings for each in "<first-findings></first-findings>" and '
        '"<second-findings></second-findings>", and evaluate which of the two is more precise '
        "and correct in describing the specimen. " + _SPEC_ANSWER_RULE + "\n\n"
        "<result-specimen>\n{source}\n</result-specimen>\n\n"
        "<first-specification>\n{first}\n</first-specification>\n\n"
        "<second-specification>\n{second}\n</second-specification>\n\n"
        "<first-findings>\n{first_errors}\n</first-findings>\n\n"
        "<second-findings>\n{second_errors}\n</second-findings>"
    ),
    original_better="First specification is better.",
    candidate_better="The second spec is better.",
)

PROMPT_SETS: dict[str, PromptSet] = {p.name: p for p in (FORWARD, REVERSE)}
