from __future__ import annotations

__all__ = (
    "SendError",
    "MaliciousPathError",
    "ForbiddenPathError",
    "NotFoundError",
    "InternalError",
    "ConfigurationError",
)


class SendError(Exception):
    status_code: int = 500

    def __init__(self, message: str | None = None, *, path: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.path = path

    @property
    def default_message(self) -> str:
        return "Internal Server Error"


class MaliciousPathError(SendError):
    status_code = 400

    @property
    def default_message(self) -> str:
        return "Malicious Path"


class ForbiddenPathError(SendError):
    status_code = 403

    @property
    def default_message(self) -> str:
        return "Forbidden"


class NotFoundError(SendError):
    status_code = 404

    @property
    def default_message(self) -> str:
        return "Not Found"


class InternalError(SendError): ...


class ConfigurationError(TypeError): ...
