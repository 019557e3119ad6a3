"""Live progress trail for a single analysis run.

The trail is an append-only sequence of labels. Step status is derived from
position (everything before the last label is done, the last one is in
progress until the trail is finished), so rendering is a pure function of
the labels appended so far.

``ProgressReporter`` owns the one chat message that shows the trail and
refreshes it in place. Refreshes run on a single background worker: the
scan never waits on the chat API, and because the worker is a FIFO queue
the refreshes land in the order the steps were appended.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Literal

from fixscout_core.formatting.blocks import Context, Message, Section

if TYPE_CHECKING:
    from fixscout_core.chat.base import ChatClient

logger = logging.getLogger(__name__)

StepStatus = Literal["pending", "in_progress", "done"]

INITIAL_LABEL = "Analyzing…"
FINAL_LABEL = "Done."

_STATUS_ICON = {
    "done": ":white_check_mark:",
    "in_progress": ":arrows_counterclockwise:",
    "pending": ":white_circle:",
}


@dataclass(frozen=True)
class ProgressStep:
    label: str
    status: StepStatus


@dataclass(frozen=True)
class ProgressTrail:
    labels: tuple[str, ...] = ()
    finished: bool = False

    def append(self, label: str) -> ProgressTrail:
        return replace(self, labels=self.labels + (label,))

    def finish(self, label: str = FINAL_LABEL) -> ProgressTrail:
        return replace(self, labels=self.labels + (label,), finished=True)

    @property
    def steps(self) -> tuple[ProgressStep, ...]:
        last = len(self.labels) - 1
        return tuple(
            ProgressStep(label, "done" if self.finished or i < last else "in_progress")
            for i, label in enumerate(self.labels)
        )


def progress_message(steps: tuple[ProgressStep, ...] | list[ProgressStep]) -> Message:
    """Render steps as a checklist: a status header plus one line per step."""
    lines = [f"{_STATUS_ICON[s.status]} {s.label}" for s in steps]
    if any(s.status == "in_progress" for s in steps):
        header = ":hourglass_flowing_sand: **Analyzing…**"
    else:
        header = ":white_check_mark: **Done**"
    fallback = steps[-1].label if steps else INITIAL_LABEL
    return Message(
        blocks=(Section(header), Context("\n".join(lines) if lines else "Starting…")),
        text=fallback,
    )


class ProgressReporter:
    """Posts the progress message once, then refreshes it as steps are appended."""

    def __init__(self, chat: ChatClient, initial_label: str = INITIAL_LABEL):
        self._chat = chat
        self._trail = ProgressTrail((initial_label,))
        self._message_id = chat.post_message(progress_message(self._trail.steps))
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fixscout-progress")

    @property
    def trail(self) -> ProgressTrail:
        return self._trail

    def advance(self, label: str) -> None:
        self._trail = self._trail.append(label)
        self._publish(self._trail)

    def finish(self) -> None:
        """Append the final step and wait until every queued refresh has been sent."""
        self._trail = self._trail.finish()
        self._publish(self._trail)
        self.close()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _publish(self, trail: ProgressTrail) -> None:
        if self._message_id is None:
            return
        future = self._executor.submit(self._chat.update_message, self._message_id, progress_message(trail.steps))
        future.add_done_callback(_log_failed_update)


def _log_failed_update(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.warning("Could not refresh progress message: %s", error)
