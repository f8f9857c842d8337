"""Conversation, message, file and settings exceptions."""

from .base import AppPermissionError, BaseAppException, NotFoundError


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation does not exist."""

    def __init__(self, message: str = "Conversation not found"):
        super().__init__(message=message)
        self.error_code = "CONVERSATION_NOT_FOUND"
        self.detail["error_code"] = self.error_code


class ConversationPermissionError(AppPermissionError):
    """Raised when the caller does not own the conversation."""

    def __init__(self, message: str = "Not authorized to access this conversation"):
        super().__init__(message=message)


class MessageNotFoundError(NotFoundError):
    """Raised when a message does not exist."""

    def __init__(self, message: str = "Message not found"):
        super().__init__(message=message)
        self.error_code = "MESSAGE_NOT_FOUND"
        self.detail["error_code"] = self.error_code


class StoredFileNotFoundError(NotFoundError):
    """Raised when an attachment handle is unknown or not readable by the caller."""

    def __init__(self, message: str = "File not found"):
        super().__init__(message=message)
        self.error_code = "FILE_NOT_FOUND"
        self.detail["error_code"] = self.error_code


class FileOperationError(BaseAppException):
    """Raised when the blob store rejects an operation."""

    def __init__(self, message: str = "File operation failed"):
        super().__init__(message=message, status_code=400, error_code="FILE_OPERATION_FAILED")


class SettingsNotFoundError(NotFoundError):
    """Raised when the caller has not saved settings yet."""

    def __init__(self, message: str = "Settings not found"):
        super().__init__(message=message)
        self.error_code = "SETTINGS_NOT_FOUND"
        self.detail["error_code"] = self.error_code
