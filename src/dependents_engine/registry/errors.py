"""Failure kinds raised by registry gateways."""


class RegistryError(Exception):
    """A registry or repository host call failed.

    Attributes:
        name: Package the call was made for, if any.
        source: Host or URL detail for diagnostics.
    """

    def __init__(self, message: str, *, name: str | None = None, source: str = "") -> None:
        super().__init__(message)
        self.name = name
        self.source = source


class PackageNotFound(RegistryError):
    """The package or its repository does not exist."""


class AuthenticationFailed(RegistryError):
    """The repository host refused the credentials (or their absence)."""
