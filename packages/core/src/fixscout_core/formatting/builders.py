"""Builders for the final analysis message, one per result kind."""

from __future__ import annotations

from dataclasses import dataclass

from fixscout_core.formatting.blocks import Block, Context, Divider, Message, Section
from fixscout_core.gh.links import pr_link
from fixscout_core.models import AnalysisResult, Candidate
from fixscout_core.versions import display_version


@dataclass(frozen=True)
class RunTrace:
    """What a run looked at, for the trace footer."""

    repo: str | None = None
    version: str | None = None
    first_release: str | None = None
    last_release: str | None = None
    release_count: int | None = None
    evaluated_prs: tuple[int, ...] = ()
    skipped_steps: tuple[str, ...] = ()


def pr_link_markdown(repo: str, pr_number: int) -> str:
    return f"[PR #{pr_number}]({pr_link(repo, pr_number)})"


def _candidate_link(candidate: Candidate) -> str:
    # A linked issue may point at a different repo than the one scanned.
    return f"[PR #{candidate.pr_number}]({candidate.pr_link})"


def skipped_note(trace: RunTrace) -> str | None:
    if not trace.skipped_steps:
        return None
    return f"Skipped steps: {'; '.join(trace.skipped_steps)}"


def footer_text(trace: RunTrace) -> str | None:
    """Join the checked / evaluated / skipped parts of the trace, or None if all are empty."""
    parts = []
    if trace.first_release and trace.last_release and trace.repo:
        parts.append(
            f"Checked releases `{display_version(trace.first_release)}`–`{display_version(trace.last_release)}` "
            f"in `{trace.repo}`"
        )
    elif trace.version:
        parts.append(f"Checked version `{display_version(trace.version)}`")

    if len(trace.evaluated_prs) > 1 and trace.repo:
        links = ", ".join(pr_link_markdown(trace.repo, n) for n in trace.evaluated_prs)
        parts.append(f"Relevant PRs evaluated: {links}")
    elif trace.release_count is not None and not trace.evaluated_prs:
        parts.append(f"Release notes reviewed: {trace.release_count}")

    skipped = skipped_note(trace)
    if skipped:
        parts.append(skipped)
    return " · ".join(parts) if parts else None


def _with_footer(blocks: list[Block], trace: RunTrace) -> tuple[Block, ...]:
    footer = footer_text(trace)
    if footer:
        blocks.append(Context(footer))
    return tuple(blocks)


def _defer_line(prefix: str, mention: str | None) -> str:
    return f"{prefix} {mention}" if mention else prefix


def high_confidence_message(candidates: tuple[Candidate, ...], trace: RunTrace) -> Message:
    first = candidates[0]
    blocks: list[Block] = []
    if len(candidates) == 1:
        blocks.append(
            Section(
                f":white_check_mark: **Fixed in {display_version(first.version)}**\n"
                f"See {_candidate_link(first)}"
            )
        )
        fallback = f"Fixed in {display_version(first.version)}. See PR #{first.pr_number}."
    else:
        lines = [
            f"{i}. **{display_version(c.version)}** — {_candidate_link(c)}"
            for i, c in enumerate(candidates, 1)
        ]
        blocks.append(Section(":white_check_mark: **High-confidence fix candidates found**"))
        blocks.append(Section("\n".join(lines)))
        fallback = "High-confidence fix candidates: " + ", ".join(
            f"{display_version(c.version)} PR #{c.pr_number}" for c in candidates
        )
    blocks.append(Context(f":large_green_circle: Confidence: **High** — {first.reason}"))
    blocks.append(Divider())
    return Message(_with_footer(blocks, trace), fallback)


def medium_confidence_message(
    candidates: tuple[Candidate, ...],
    trace: RunTrace,
    mention: str | None = None,
    display_limit: int = 3,
) -> Message:
    shown = candidates[:display_limit]
    lines = [
        f"{i}. **{display_version(c.version)}** — {_candidate_link(c)}" for i, c in enumerate(shown, 1)
    ]
    hidden = len(candidates) - len(shown)
    if hidden > 0:
        lines.append(f"…and {hidden} more")
    blocks: list[Block] = [
        Section(
            ":mag: **Potential candidates found**\n"
            + _defer_line("Deferring to SDK maintainers to confirm.", mention)
        ),
        Section("\n".join(lines)),
        Context(f":large_yellow_circle: Confidence: **Medium** — {candidates[0].reason}"),
        Divider(),
    ]
    fallback = "Potential candidates: " + ", ".join(
        f"{display_version(c.version)} PR #{c.pr_number}" for c in shown
    )
    return Message(_with_footer(blocks, trace), fallback)


def no_result_message(trace: RunTrace, mention: str | None = None) -> Message:
    version = display_version(trace.version or "?")
    blocks: list[Block] = [
        Section(
            ":thinking_face: **No fix identified**\n"
            f"I wasn't able to identify a fix in releases after `{version}`. "
            + _defer_line("Deferring to SDK maintainers for investigation.", mention)
        ),
        Divider(),
    ]
    return Message(_with_footer(blocks, trace), f"No fix identified in releases after {version}.")


def too_old_message(message: str, trace: RunTrace, mention: str | None = None) -> Message:
    version = display_version(trace.version or "?")
    text = (
        f":warning: **Version too old**\n{message}\n"
        + _defer_line("Deferring to SDK maintainers.", mention)
    )
    skipped = skipped_note(trace)
    if skipped:
        text += f"\n\n{skipped}"
    return Message((Section(text),), f"Version {version} is too old.")


def simple_text_message(message: str, skipped: str | None = None, mention: str | None = None) -> Message:
    """Single informational block: clarification, already-latest, invalid version, fetch failure."""
    text = message + (f" {mention}" if mention else "") + (f"\n\n{skipped}" if skipped else "")
    return Message((Section(f":information_source: {text}"),), message)


def error_message(summary: str) -> Message:
    escaped = summary.replace("\\", "\\\\").replace("`", "` ")
    return Message(
        (Section(f":x: **Something went wrong**\n`{escaped}`"),),
        f"Something went wrong: {summary}",
    )


def render_result(
    result: AnalysisResult,
    trace: RunTrace,
    mention: str | None = None,
    displayed_medium: int = 3,
) -> Message:
    """Build the final message for any terminal result."""
    if result.kind == "high_confidence":
        return high_confidence_message(result.candidates, trace)
    if result.kind == "medium_confidence":
        return medium_confidence_message(result.candidates, trace, mention, displayed_medium)
    if result.kind == "no_result":
        return no_result_message(trace, mention)
    if result.kind == "too_old":
        return too_old_message(result.message, trace, mention)
    if result.kind == "fetch_failed":
        return simple_text_message(result.message, skipped_note(trace), mention)
    return simple_text_message(result.message, skipped_note(trace))
