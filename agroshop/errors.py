class AgroShopError(Exception):
    """Base class for errors surfaced to the caller of a shop operation."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(AgroShopError):
    """Malformed or missing input, e.g. a non-positive amount."""

    status_code = 400


class NotFound(AgroShopError):
    """A referenced entity id does not exist."""

    status_code = 404


class StoreError(AgroShopError):
    """The database rejected or failed a write; nothing was committed."""

    status_code = 503
