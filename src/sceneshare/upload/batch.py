"""Upload tasks and the batch that groups them for one share attempt."""

from __future__ import annotations

import uuid
from collections import Counter
from collections.abc import Sequence

from sceneshare.models import LocalImage, UploadProgress, UploadState

from .state import UploadStateMachine


class UploadTask:
    """One image paired with its single upload attempt.

    Parameters
    ----------
    image:
        The image to upload.
    position:
        1-based position of the image within its batch.
    """

    __slots__ = ("error", "image", "machine", "position", "remote_url")

    def __init__(self, image: LocalImage, position: int) -> None:
        self.image = image
        self.position = position
        self.machine = UploadStateMachine(f"#{position} ({image.name})")
        self.remote_url: str | None = None
        self.error: Exception | None = None

    @property
    def state(self) -> UploadState:
        return self.machine.state

    def start(self) -> None:
        self.machine.transition(UploadState.IN_FLIGHT)

    def succeed(self, remote_url: str) -> None:
        self.machine.transition(UploadState.SUCCEEDED)
        self.remote_url = remote_url

    def fail(self, error: Exception) -> None:
        self.machine.transition(UploadState.FAILED)
        self.error = error

    def __repr__(self) -> str:
        return f"UploadTask(position={self.position}, state={self.state.value})"


class UploadBatch:
    """All upload tasks of one share attempt plus their result slots.

    Each task writes its URL into the slot addressed by its own position,
    so the final list follows selection order no matter which upload
    finishes first.

    Invariant: ``succeeded + failed + in_flight + pending == total``.
    """

    def __init__(self, images: Sequence[LocalImage]) -> None:
        self.batch_id: str = uuid.uuid4().hex
        self.tasks: list[UploadTask] = [
            UploadTask(image, position) for position, image in enumerate(images, start=1)
        ]
        self._slots: list[str | None] = [None] * len(self.tasks)
        self._completed = 0
        self._abandoned: set[int] = set()

    @property
    def total(self) -> int:
        return len(self.tasks)

    @property
    def completed(self) -> int:
        """Number of tasks that finished with a response (success or failure)."""
        return self._completed

    def progress(self) -> UploadProgress:
        return UploadProgress(completed=self._completed, total=self.total)

    def counts(self) -> dict[UploadState, int]:
        tally = Counter(task.state for task in self.tasks)
        return {state: tally.get(state, 0) for state in UploadState}

    def record_success(self, task: UploadTask, remote_url: str) -> UploadProgress:
        task.succeed(remote_url)
        self._slots[task.position - 1] = remote_url
        self._completed += 1
        return self.progress()

    def record_failure(self, task: UploadTask, error: Exception) -> UploadProgress:
        task.fail(error)
        self._completed += 1
        return self.progress()

    def abandon(self, task: UploadTask, error: Exception) -> None:
        """Mark an unfinished task as failed without counting it as completed."""
        if not task.machine.is_terminal:
            task.fail(error)
            self._abandoned.add(task.position)

    def failed_tasks(self) -> list[UploadTask]:
        """Tasks that failed on their own, lowest position first."""
        return [
            task for task in self.tasks
            if task.state is UploadState.FAILED and task.position not in self._abandoned
        ]

    def urls(self) -> list[str]:
        """Remote URLs in selection order.

        Raises
        ------
        ValueError
            If any task has not succeeded.
        """
        missing = [task.position for task in self.tasks if task.state is not UploadState.SUCCEEDED]
        if missing:
            raise ValueError(f"Batch {self.batch_id} has unfinished uploads: {missing}")
        return [url for url in self._slots if url is not None]
