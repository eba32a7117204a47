"""Data models for queued generation requests and their history."""

import logging
import time
from dataclasses import asdict, dataclass, field
from enum import Enum

from imagen_studio.core.catalog import AspectRatio, ModelType
from imagen_studio.core.errors import InvalidTransition

logger = logging.getLogger(__name__)


class QueueStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"


class HistoryStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not HistoryStatus.PROCESSING


@dataclass(frozen=True)
class ValidatedRequest:
    """A submission that passed validation but has not been admitted yet."""

    prompt: str
    aspect_ratio: AspectRatio
    model: ModelType


@dataclass(frozen=True)
class GenerationRequest:
    """An accepted request.  Immutable once created by the admission controller."""

    id: str
    prompt: str
    model: ModelType
    aspect_ratio: AspectRatio
    submitted_at: float

    def to_dict(self) -> dict:
        data = asdict(self)
        data["model"] = self.model.value
        data["aspect_ratio"] = self.aspect_ratio.value
        return data


@dataclass
class QueueEntry:
    """A request waiting in, or being executed from, the queue."""

    request: GenerationRequest
    queue_status: QueueStatus = QueueStatus.QUEUED

    @property
    def id(self) -> str:
        return self.request.id

    def to_dict(self) -> dict:
        return {**self.request.to_dict(), "status": self.queue_status.value}


@dataclass
class HistoryEntry:
    """Lifecycle record of one request.

    Created with ``status=processing`` at acceptance and moved to a terminal
    status exactly once.  ``result_image`` is set only for completed entries
    and ``error_message`` only for failed ones.
    """

    request: GenerationRequest
    status: HistoryStatus = HistoryStatus.PROCESSING
    result_image: str | None = None
    error_message: str | None = None
    attempts: int = 0
    finished_at: float | None = field(default=None)

    @property
    def id(self) -> str:
        return self.request.id

    def complete(self, image: str, attempts: int = 0) -> None:
        """Mark the entry completed with a data URI payload.

        Raises:
            InvalidTransition: If the entry already reached a terminal status
        """
        self._ensure_processing(HistoryStatus.COMPLETED)
        self.status = HistoryStatus.COMPLETED
        self.result_image = image
        self.attempts = attempts
        self.finished_at = time.time()

    def fail(self, message: str, attempts: int = 0) -> None:
        """Mark the entry failed with a human-readable reason.

        Raises:
            InvalidTransition: If the entry already reached a terminal status
        """
        self._ensure_processing(HistoryStatus.FAILED)
        self.status = HistoryStatus.FAILED
        self.error_message = message
        self.attempts = attempts
        self.finished_at = time.time()

    def _ensure_processing(self, target: HistoryStatus) -> None:
        if self.status.is_terminal:
            logger.warning(
                "Refusing %s -> %s for request %s", self.status.value, target.value, self.id
            )
            raise InvalidTransition(
                f"Request {self.id} is already {self.status.value}; cannot mark {target.value}"
            )

    def to_dict(self) -> dict:
        return {
            **self.request.to_dict(),
            "status": self.status.value,
            "result_image": self.result_image,
            "error_message": self.error_message,
            "attempts": self.attempts,
            "finished_at": self.finished_at,
        }
