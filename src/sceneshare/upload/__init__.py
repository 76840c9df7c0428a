"""Upload orchestration: batches, per-task state, concurrent fan-out.

Exports
-------
UploadOrchestrator
    Upload a batch concurrently and return URLs in selection order.
UploadBatch / UploadTask
    Per-attempt bookkeeping with index-addressed result slots.
UploadStateMachine
    Enforce ``PENDING -> IN_FLIGHT -> SUCCEEDED | FAILED``.
"""

from .batch import UploadBatch, UploadTask
from .orchestrator import ProgressCallback, UploadOrchestrator
from .state import UploadStateMachine

__all__ = [
    "ProgressCallback",
    "UploadBatch",
    "UploadOrchestrator",
    "UploadStateMachine",
    "UploadTask",
]
