"""Domain errors raised by the order workflows and mapped to HTTP by the routers."""


class InventoryError(Exception):
    """Base class for errors scoped to a single user action."""


class BusinessValidationError(InventoryError):
    """A required selection or field is missing; raised before any write."""


class RecordNotFoundError(InventoryError):
    pass


class ReferentialIntegrityError(InventoryError):
    """A delete was refused because other records still reference the row."""


class OrderLockedError(InventoryError):
    """The order is in a terminal status and its items can no longer be edited."""


class InvoiceExportError(InventoryError):
    pass
