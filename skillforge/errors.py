"""
Error taxonomy
==============
Every domain failure raised by the core derives from SkillForgeError and
carries the HTTP status it maps to. main.py renders them as
{"message": ...} through a single exception handler.
"""


class SkillForgeError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str = "", **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, **self.extra}


class ValidationError(SkillForgeError):
    """Malformed or missing request fields."""

    status_code = 400
    default_message = "Invalid request"


class SchemaValidationError(ValidationError):
    """Roadmap structure violates the canonical week/step schema."""

    default_message = "Roadmap does not match the expected schema"


class InvalidIndex(ValidationError):
    default_message = "Invalid index"


class QuotaExceeded(SkillForgeError):
    status_code = 400
    default_message = "Quota exceeded"


class NotFound(SkillForgeError):
    status_code = 404
    default_message = "Not found"


class AuthenticationError(SkillForgeError):
    status_code = 401
    default_message = "Not authenticated"


class MalformedModelOutput(SkillForgeError):
    """
    Model text could not be recovered as structured data.

    The raw completion is kept on the exception for diagnostics but is
    never echoed back to the client.
    """

    status_code = 502
    default_message = "AI provider returned an unusable response"

    def __init__(self, raw_text: str, message: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class AIProviderError(SkillForgeError):
    status_code = 502
    default_message = "AI provider request failed"
