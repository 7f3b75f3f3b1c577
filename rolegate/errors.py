"""Error taxonomy for the access-control engine.

Every failure surfaces as an ``AccessControlError`` subclass carrying a
human-readable message and a ``kind`` tag, so callers can branch on the tag
without importing every subclass.
"""

from __future__ import annotations


class AccessControlError(Exception):
    """Base class for every error raised by rolegate."""

    kind: str = "AccessControlError"

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class InvalidNameError(AccessControlError):
    """Empty, non-string, or reserved role/resource name."""

    kind = "InvalidName"


class InvalidRoleError(AccessControlError):
    """Malformed or empty role argument."""

    kind = "InvalidRole"


class InvalidResourceError(AccessControlError):
    """Malformed or empty resource argument."""

    kind = "InvalidResource"


class InvalidGrantsInputError(AccessControlError):
    """Bulk grants input is neither a mapping nor a list, or a list entry is incomplete."""

    kind = "InvalidGrantsInput"


class InvalidActionError(AccessControlError):
    kind = "InvalidAction"


class InvalidPossessionError(AccessControlError):
    kind = "InvalidPossession"


class RoleNotFoundError(AccessControlError):
    """A role referenced by a query, extension, or hierarchy lookup does not exist."""

    kind = "RoleNotFound"

    def __init__(self, role: object) -> None:
        self.role = role
        super().__init__(f'Role not found: "{role}"')


class SelfExtensionError(AccessControlError):
    kind = "SelfExtension"

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f'Cannot extend role "{role}" by itself.')


class CrossInheritanceError(AccessControlError):
    """An extension would close a cycle in the role graph."""

    kind = "CrossInheritance"

    def __init__(self, extender: str, role: str) -> None:
        self.extender = extender
        self.role = role
        super().__init__(
            f'Cross inheritance is not allowed. Role "{extender}" already extends "{role}".'
        )


class LockedError(AccessControlError):
    kind = "Locked"

    def __init__(self, message: str = "") -> None:
        super().__init__(
            message or "Cannot alter the underlying grants model. AccessControl instance is locked."
        )


class EmptyGrantsError(AccessControlError):
    kind = "EmptyGrants"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or "Cannot lock empty or invalid grants model.")


__all__ = [
    "AccessControlError",
    "CrossInheritanceError",
    "EmptyGrantsError",
    "InvalidActionError",
    "InvalidGrantsInputError",
    "InvalidNameError",
    "InvalidPossessionError",
    "InvalidResourceError",
    "InvalidRoleError",
    "LockedError",
    "RoleNotFoundError",
    "SelfExtensionError",
]
