"""Chat Relay — exceptions and the response bodies they map to."""

from typing import Optional

INVALID_REQUEST_ERROR = "Invalid request. Messages array is required."
CHAT_FAILED_ERROR = "Failed to process chat request"
CHAT_FAILED_MESSAGE = "Sorry, I encountered an error. Please try again or contact us directly."


class RelayException(Exception):
    """Rendered as-is by the app's exception handler."""

    def __init__(self, status_code: int, content: dict):
        super().__init__(content.get("error", ""))
        self.status_code = status_code
        self.content = content


class InvalidChatRequestException(RelayException):
    def __init__(self):
        super().__init__(status_code=400, content={"error": INVALID_REQUEST_ERROR})


class ChatProcessingException(RelayException):
    def __init__(self):
        super().__init__(
            status_code=500,
            content={"error": CHAT_FAILED_ERROR, "message": CHAT_FAILED_MESSAGE},
        )


class UpstreamError(Exception):
    """The completion API call failed. Carries operator-facing detail only;
    callers get ChatProcessingException instead."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.status_code = status_code
