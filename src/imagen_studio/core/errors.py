"""Exception hierarchy for Imagen Studio.

Every exception carries a message that is safe to show to the user as-is.

- :class:`ValidationError` – input problem the user can correct
- :class:`RateLimited` / :class:`QueueFull` – admission rejections
- :class:`GenerationError` – a request failed after all retries
- :class:`AuthError` / :class:`NotAuthenticated` – identity gate
- :class:`InvalidTransition` – attempt to change a terminal history entry

Validation and admission errors are raised before any state is mutated.
Generation errors never leave the execution engine; they are recorded on the
request's history entry instead.
"""


class ImagenStudioError(Exception):
    """Base class for all domain errors."""


class ValidationError(ImagenStudioError):
    """User-friendly validation error.

    The message is intended to be displayed directly to the user.
    """


class AdmissionError(ImagenStudioError):
    """A valid request was refused by the admission controller."""


class RateLimited(AdmissionError):
    """Submitted before the debounce interval elapsed."""

    def __init__(self, retry_after: float) -> None:
        super().__init__("Please wait a moment before sending another request.")
        self.retry_after = retry_after


class QueueFull(AdmissionError):
    """The queue is at capacity."""

    def __init__(self, capacity: int) -> None:
        super().__init__(f"Queue is full ({capacity}). Please wait for jobs to finish.")
        self.capacity = capacity


class GenerationError(ImagenStudioError):
    """The remote provider did not produce an image."""


class AuthError(ImagenStudioError):
    """The identity provider could not authenticate the user."""


class NotAuthenticated(ImagenStudioError):
    """A submission was attempted without a signed-in user."""

    def __init__(self) -> None:
        super().__init__("Sign in to submit generation requests.")


class InvalidTransition(ImagenStudioError):
    """A history entry was asked to leave a terminal status."""
