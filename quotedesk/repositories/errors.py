class NotFoundError(KeyError):
    """Entity id does not exist."""


class CostInUseError(ValueError):
    """A catalogue cost is still referenced by at least one quotation."""
