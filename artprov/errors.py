# artprov/errors.py
"""
Failure kinds raised by registry operations.

Every rejected mutation raises one of the four RegistryError subclasses
below and leaves registry state untouched. Queries never raise; absence
is reported as None.

Codes are stable across both subsystems:
    1  Unauthorized
    2  AlreadyRegistered
    3  NotFound
    4  AlreadyAuthenticated
"""


class RegistryError(Exception):
    """Base class for registry failures."""

    code: int = 0
    kind: str = "RegistryError"

    def __init__(self, message: str = ""):
        self.message = message or self.kind
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.kind, "code": self.code, "message": self.message}


class Unauthorized(RegistryError):
    """
    Caller lacks the required role or state.

    Raised both for "no record" and "record not yet verified" so the
    two cases cannot be told apart from the error alone.
    """

    code = 1
    kind = "Unauthorized"


class AlreadyRegistered(RegistryError):
    """Caller identity already has an artist or authenticator record."""

    code = 2
    kind = "AlreadyRegistered"


class NotFound(RegistryError):
    """Verify action targets an identity with no record."""

    code = 3
    kind = "NotFound"


class AlreadyAuthenticated(RegistryError):
    """An authentication already exists for the artwork ID."""

    code = 4
    kind = "AlreadyAuthenticated"

