"""Error types shared by services and routes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class FormsError(Exception):
    status_code: int
    message: str

    def __str__(self) -> str:  # pragma: no cover - human-friendly
        return self.message


class FormValidationError(FormsError):
    """Input rejected before any store write was attempted."""

    def __init__(self, message: str) -> None:
        super().__init__(status_code=422, message=message)


class StoreWriteError(FormsError):
    """The store rejected an insert, update or delete."""

    def __init__(self, message: str) -> None:
        super().__init__(status_code=503, message=message)


class NotFoundError(FormsError):
    def __init__(self, message: str = "Not found") -> None:
        super().__init__(status_code=404, message=message)


class AccessDeniedError(FormsError):
    def __init__(self, message: str = "You need to be signed in to access this form.") -> None:
        super().__init__(status_code=403, message=message)


class IdentityProviderError(FormsError):
    """The auth server was unreachable or rejected the request."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(status_code=status_code, message=message)


__all__ = [
    "FormsError",
    "FormValidationError",
    "StoreWriteError",
    "NotFoundError",
    "IdentityProviderError",
    "AccessDeniedError",
]
