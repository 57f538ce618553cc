"""
Custom exceptions for the sentence categorizer.
"""

from typing import Any, Optional


class SentenceCategorizerError(Exception):
    """Base exception for all sentence categorizer errors."""

    pass


class ConfigurationError(SentenceCategorizerError):
    """Raised when configuration parameters are invalid."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        suggested_fix: Optional[str] = None,
    ):
        self.parameter = parameter
        self.suggested_fix = suggested_fix

        full_message = f"Configuration Error: {message}"
        if parameter:
            full_message += f" (Parameter: {parameter})"
        if suggested_fix:
            full_message += f" Suggested fix: {suggested_fix}"

        super().__init__(full_message)


class ValidationError(SentenceCategorizerError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.field = field
        self.value = value

        full_message = f"Validation Error: {message}"
        if field:
            full_message += f" (Field: {field})"
        if value is not None:
            full_message += f" (Value: {value})"

        super().__init__(full_message)


class EmptyDocumentError(SentenceCategorizerError):
    """Raised when segmentation yields no sentences."""

    def __init__(self, message: str = "No sentences found in document"):
        super().__init__(f"Empty Document: {message}")


class MalformedResponseError(SentenceCategorizerError):
    """Raised when no label array can be recovered from a model response."""

    def __init__(
        self, message: str, raw_text: Optional[str] = None, reason: Optional[str] = None
    ):
        self.raw_text = raw_text
        self.reason = reason

        full_message = f"Malformed Response: {message}"
        if reason:
            full_message += f" (Reason: {reason})"
        if raw_text is not None:
            full_message += f" (Raw response: {raw_text!r})"

        super().__init__(full_message)


class RemoteAPIError(SentenceCategorizerError):
    """Raised when the chat-completion endpoint fails or cannot be reached."""

    def __init__(
        self, message: str, status_code: Optional[int] = None, body: Any = None
    ):
        self.status_code = status_code
        self.body = body

        full_message = f"API Error: {message}"
        if status_code is not None:
            full_message += f" (Status: {status_code})"
        if body:
            full_message += f" (Body: {body})"

        super().__init__(full_message)


class CategoryDiscoveryError(SentenceCategorizerError):
    """Raised when the category vocabulary cannot be derived."""

    def __init__(self, message: str, sample_size: Optional[int] = None):
        self.sample_size = sample_size

        full_message = f"Category Discovery Error: {message}"
        if sample_size is not None:
            full_message += f" (Sample size: {sample_size})"

        super().__init__(full_message)


class ClassificationError(SentenceCategorizerError):
    """Raised when a batch classification request fails as a whole."""

    def __init__(
        self,
        message: str,
        batch_index: Optional[int] = None,
        total_batches: Optional[int] = None,
    ):
        self.batch_index = batch_index
        self.total_batches = total_batches

        full_message = f"Classification Error: {message}"
        if batch_index is not None:
            if total_batches is not None:
                full_message += f" (Batch: {batch_index + 1}/{total_batches})"
            else:
                full_message += f" (Batch: {batch_index + 1})"

        super().__init__(full_message)


class RunCancelledError(SentenceCategorizerError):
    """Raised when a run is cancelled between units of work."""

    def __init__(self, message: str = "Run cancelled", batches_completed: int = 0):
        self.batches_completed = batches_completed
        super().__init__(
            f"Cancelled: {message} (Batches completed: {batches_completed})"
        )
