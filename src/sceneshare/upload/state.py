"""Upload task state machine.

Tracks one upload through its lifecycle and rejects invalid transitions,
so a task can never report success twice or succeed after failing.
"""

from __future__ import annotations

from sceneshare.models import UploadState


class UploadStateMachine:
    """Finite state machine for a single upload task.

    Valid transitions::

        PENDING    -> IN_FLIGHT | FAILED
        IN_FLIGHT  -> SUCCEEDED | FAILED
        SUCCEEDED  -> (terminal)
        FAILED     -> (terminal)

    ``PENDING -> FAILED`` covers tasks abandoned with their batch before a
    request was ever sent.

    Parameters
    ----------
    label:
        Identifies the task in error messages.
    """

    VALID_TRANSITIONS: dict[UploadState, set[UploadState]] = {
        UploadState.PENDING: {UploadState.IN_FLIGHT, UploadState.FAILED},
        UploadState.IN_FLIGHT: {UploadState.SUCCEEDED, UploadState.FAILED},
        UploadState.SUCCEEDED: set(),
        UploadState.FAILED: set(),
    }

    TERMINAL: frozenset[UploadState] = frozenset({UploadState.SUCCEEDED, UploadState.FAILED})

    def __init__(self, label: str) -> None:
        self.label: str = label
        self.state: UploadState = UploadState.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.state in self.TERMINAL

    def transition(self, new_state: UploadState) -> None:
        """Move to *new_state*.

        Raises
        ------
        ValueError
            If the transition from the current state is not allowed.
        """
        allowed = self.VALID_TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise ValueError(
                f"Invalid state transition: {self.state.value} -> {new_state.value} "
                f"for upload {self.label}. "
                f"Allowed transitions from {self.state.value}: "
                f"{{{', '.join(sorted(s.value for s in allowed))}}}"
            )
        self.state = new_state
