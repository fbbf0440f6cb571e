"""
DrawYourMeme exception hierarchy.

The registry, the image store and the settings loader raise these. Each
carries a message for the user and a ``details`` dict for the logs; the
HTTP and bot layers decide how a given error is shown.
"""

from typing import Any


def _present(**values: Any) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


class DrawYourMemeError(Exception):
    """Base class for every error this package raises on purpose."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        extra = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({extra})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class RegistryError(DrawYourMemeError):
    """
    A registry operation that could not be completed.

    ``entity_type`` is one of user, token or vote; ``operation`` names the
    Registry method that refused.
    """

    def __init__(
        self,
        message: str,
        *,
        entity_type: str | None = None,
        entity_id: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        merged = _present(entity_type=entity_type, entity_id=entity_id, operation=operation)
        merged.update(details or {})
        super().__init__(message, details=merged)
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.operation = operation


class NotFoundError(RegistryError):
    """No record exists under the given id."""

    def __init__(self, message: str = "Entity not found", **kwargs: Any):
        super().__init__(message, **kwargs)


class TokenNotFoundError(NotFoundError):
    """A vote named a token id the registry does not hold."""

    def __init__(self, message: str = "Token not found", *, token_id: str | None = None):
        super().__init__(message, entity_type="token", entity_id=token_id, operation="record_vote")
        self.token_id = token_id


class DuplicateIdentityError(RegistryError):
    """A Solana address or Telegram id already belongs to another user."""

    def __init__(
        self,
        message: str = "Identity already registered",
        *,
        field: str | None = None,
        value: str | None = None,
        operation: str = "create_user",
    ):
        super().__init__(
            message,
            entity_type="user",
            operation=operation,
            details=_present(field=field, value=value),
        )
        self.field = field
        self.value = value


class DuplicateVoteError(RegistryError):
    """The voter identity already voted for this token."""

    def __init__(
        self,
        message: str = "Identity has already voted for this token",
        *,
        token_id: str | None = None,
        voter_identity: str | None = None,
    ):
        super().__init__(
            message,
            entity_type="token",
            entity_id=token_id,
            operation="record_vote",
            details=_present(voter_identity=voter_identity),
        )
        self.token_id = token_id
        self.voter_identity = voter_identity


class ValidationError(DrawYourMemeError):
    """An argument the caller supplied is out of range or not allowed."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details={**_present(field=field), **(details or {})})
        self.field = field


class InvalidImageError(ValidationError):
    """Uploaded image is empty, too large or not an image."""

    def __init__(
        self,
        message: str = "Invalid image upload",
        *,
        content_type: str | None = None,
        size: int | None = None,
    ):
        super().__init__(
            message,
            field="image",
            details=_present(content_type=content_type, size=size),
        )
        self.content_type = content_type
        self.size = size


class ConfigurationError(DrawYourMemeError):
    """A DYM_* environment variable holds an unusable value."""

    def __init__(
        self,
        message: str,
        *,
        env_var: str | None = None,
        config_key: str | None = None,
    ):
        super().__init__(message, details=_present(env_var=env_var, config_key=config_key))
        self.env_var = env_var
        self.config_key = config_key


def format_exception(error: Exception) -> str:
    """One-line description for log messages."""
    if isinstance(error, DrawYourMemeError):
        return str(error)
    return f"{type(error).__name__}: {error}"
