"""Exception types raised by the validated entry points and the data store."""


class GrindomError(Exception):
    """Base class for every error raised on purpose by this package."""


class InvalidInputError(GrindomError, ValueError):
    """Caller-supplied input failed validation (empty name, bad price, ...)."""


class UnknownClientError(GrindomError, LookupError):
    """An order referenced a client id the store does not hold."""

    def __init__(self, client_id) -> None:
        super().__init__(f"Unknown client id: {client_id}")
        self.client_id = client_id
