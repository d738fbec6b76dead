# loanchat/errors.py

"""
Error taxonomy for the chat flow.

- ValidationError: missing/empty input, nothing is persisted
- StorageError: message/product store unreachable or rejected the call
- GenerationError: generation failed, even after the fallback retry
- NoSuitableModelError: fallback discovery found no usable model
"""


class ChatError(Exception):
    """Base class for chat-flow errors."""

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ChatError):
    pass


class StorageError(ChatError):
    pass


class GenerationError(ChatError):
    pass


class NoSuitableModelError(ChatError):
    pass
