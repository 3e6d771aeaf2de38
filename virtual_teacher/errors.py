"""Errors raised by the domain core."""


class DomainError(Exception):
    """Base exception for domain rule violations."""

    pass


class EntityNotFoundError(DomainError):
    """Raised when no entity exists for the given id, title or email."""

    def __init__(self, entity: str, attribute: str | None = None, value: object = None) -> None:
        if attribute is None:
            message = f'{entity} not found.'
        else:
            message = f'{entity} with {attribute} {value} not found.'
        super().__init__(message)
        self.entity = entity
        self.attribute = attribute
        self.value = value


class EntityDuplicateError(DomainError):
    """Raised before a write that would break a uniqueness rule."""

    def __init__(self, entity: str, attribute: str, value: object) -> None:
        super().__init__(f'{entity} with {attribute} {value} already exists.')
        self.entity = entity
        self.attribute = attribute
        self.value = value


class UnauthorizedError(DomainError):
    """Raised when the authorization policy denies an action."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidArgumentError(DomainError):
    """Raised for unknown role names and out-of-range values."""

    pass
