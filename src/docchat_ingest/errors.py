"""Error taxonomy for the ingestion pipeline.

Each component raises a :class:`PipelineStageError` subclass at its own
boundary, converting third-party exceptions with ``raise ... from exc``.
The orchestrator wraps whichever one escapes in a single
:class:`IngestionError` that names the failing stage, so callers can tell
"nothing written" apart from "partially written".
"""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Base class for errors raised by a single pipeline stage."""


class FetchError(PipelineStageError):
    """The stored object is missing or could not be transferred."""

    def __init__(self, message: str, *, key: str) -> None:
        super().__init__(message)
        self.key = key


class ParseError(PipelineStageError):
    """The fetched document is corrupt or unreadable."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message)
        self.path = path


class EmbeddingError(PipelineStageError):
    """Raised when embedding generation fails."""


class IndexWriteError(PipelineStageError):
    """A batch upsert failed.

    Attributes
    ----------
    namespace:
        Index namespace the batch was written to.
    batch_index:
        0-based index of the failing batch.
    committed:
        Number of vectors written by the batches before it.
    """

    def __init__(self, message: str, *, namespace: str, batch_index: int, committed: int) -> None:
        super().__init__(message)
        self.namespace = namespace
        self.batch_index = batch_index
        self.committed = committed


class IngestionError(RuntimeError):
    """Single failure surfaced by :meth:`IngestionPipeline.ingest`.

    The underlying stage error is available as ``cause`` (and as
    ``__cause__``).  ``partially_written`` is ``True`` only when some
    batches reached the index before the failure.
    """

    def __init__(
        self,
        key: str,
        stage: str,
        cause: BaseException,
        *,
        partially_written: bool = False,
    ) -> None:
        super().__init__(f"Failed to ingest {key!r} during {stage}: {cause}")
        self.key = key
        self.stage = stage
        self.cause = cause
        self.partially_written = partially_written
