"""Errors raised by the remote gateway and the services built on it."""


class GatewayError(Exception):
    """A remote store call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(GatewayError):
    """Referenced product or price entry does not exist."""


class ConflictError(GatewayError):
    """A price entry for that (product, store) pair already exists."""


class TransportError(GatewayError):
    """The call could not complete (network, timeout or service error)."""


class SeedError(Exception):
    """Seeding stopped at the first failed call. Nothing is rolled back."""

    def __init__(
        self,
        cause: Exception,
        sample_index: int,
        sample_name: str,
        products_created: int,
        prices_added: int,
    ):
        super().__init__(
            f"Seeding failed at sample #{sample_index + 1} ({sample_name}): {cause}"
        )
        self.cause = cause
        self.sample_index = sample_index
        self.sample_name = sample_name
        self.products_created = products_created
        self.prices_added = prices_added
