"""
Error taxonomy for the service layer.

Every failure a service can report carries a stable ``kind`` string that
callers can check by machine, a human readable ``message`` and the HTTP
status the error handler middleware answers with.
"""


class ServiceError(Exception):
    status_code = 500
    category = "Error"
    kind = "Error"

    def __init__(self, message=None, kind=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__
        if kind:
            self.kind = kind

    def to_dict(self):
        return {"kind": self.kind, "type": self.category, "message": self.message}


class NotFound(ServiceError):
    """The requested resource could not be found."""
    status_code = 404
    category = "NotFound"
    kind = "NotFound"


class Forbidden(ServiceError):
    """You don't have permission to access this resource."""
    status_code = 403
    category = "Forbidden"
    kind = "Forbidden"


class Validation(ServiceError):
    """Invalid input. Please check your request."""
    status_code = 400
    category = "Validation"
    kind = "ValidationError"


class Conflict(ServiceError):
    """The request conflicts with the current state of the resource."""
    status_code = 409
    category = "Conflict"
    kind = "Conflict"


class PreconditionFailed(ServiceError):
    """The resource is not in a state that allows this operation."""
    status_code = 400
    category = "PreconditionFailed"
    kind = "PreconditionFailed"


class Unauthorized(ServiceError):
    """Authentication failed."""
    status_code = 401
    category = "Unauthorized"
    kind = "Unauthorized"


class StorageFailure(ServiceError):
    """Unable to reach the database. Please try again later."""
    status_code = 500
    category = "StorageFailure"
    kind = "StorageFailure"


class StorageTimeout(StorageFailure):
    """The database did not answer in time. Please try again later."""
    status_code = 504
    kind = "StorageTimeout"


# Not found

class TableNotFound(NotFound):
    """The requested table could not be found."""
    kind = "TableNotFound"


class OrderNotFound(NotFound):
    """The requested order could not be found."""
    kind = "OrderNotFound"


class OrderItemNotFound(NotFound):
    """The requested order item could not be found."""
    kind = "OrderItemNotFound"


class InvoiceNotFound(NotFound):
    """The requested invoice could not be found."""
    kind = "InvoiceNotFound"


class FoodNotFound(NotFound):
    """The requested food item could not be found."""
    kind = "FoodNotFound"


class MenuNotFound(NotFound):
    """The requested menu could not be found."""
    kind = "MenuNotFound"


class UserNotFound(NotFound):
    """The requested user could not be found."""
    kind = "UserNotFound"


# Validation

class IdentifierMismatch(Validation):
    """The identifier in the request body does not match the URL."""
    kind = "IdentifierMismatch"


class DuplicateEmail(Validation):
    """A user with this email already exists."""
    kind = "DuplicateEmail"


class DuplicatePhone(Validation):
    """A user with this phone already exists."""
    kind = "DuplicatePhone"


# Conflict

class TableOccupied(Conflict):
    """This table is already occupied by an active order. Please choose a different table."""
    kind = "TableOccupied"


class InvoiceAlreadyExists(Conflict):
    """This order has already been invoiced."""
    kind = "InvoiceAlreadyExists"


# Precondition failed

class OrderNotModifiable(PreconditionFailed):
    """This order cannot be modified in its current state."""
    kind = "OrderNotModifiable"


class InvalidStatusTransition(PreconditionFailed):
    """The order cannot move to the requested status."""
    kind = "InvalidStatusTransition"


class HasDependentInvoice(PreconditionFailed):
    """This order cannot be deleted because it has associated invoices."""
    kind = "HasDependentInvoice"


class InvoiceAlreadyPaid(PreconditionFailed):
    """Paid invoices cannot be deleted."""
    kind = "InvoiceAlreadyPaid"


class OrderNotInvoiceable(PreconditionFailed):
    """Cancelled orders cannot be invoiced."""
    kind = "OrderNotInvoiceable"


class TableInUse(PreconditionFailed):
    """This table cannot be deleted because it is used in orders."""
    kind = "TableInUse"


class MenuInUse(PreconditionFailed):
    """This menu cannot be deleted because it still has food items."""
    kind = "MenuInUse"


class FoodInUse(PreconditionFailed):
    """This food item cannot be deleted because it is used in orders."""
    kind = "FoodInUse"


# Unauthorized

class InvalidSignature(Unauthorized):
    """Signature verification failed."""
    kind = "InvalidSignature"


class Expired(Unauthorized):
    """The token has expired."""
    kind = "Expired"


class TokenNotRecognized(Unauthorized):
    """Refresh token not recognized."""
    kind = "TokenNotRecognized"


class WrongTokenType(Unauthorized):
    """The token is not of the expected type."""
    kind = "WrongTokenType"


class InvalidCredentials(Unauthorized):
    """Invalid email or password."""
    kind = "InvalidCredentials"
