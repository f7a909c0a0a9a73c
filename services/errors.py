"""Business-rule errors raised by the case-management services.

Each error is an HTTP exception so the JSON error handler registered by the
application factory renders it without extra translation in the routes.
"""

from werkzeug.exceptions import BadRequest, Conflict, Forbidden, NotFound
from werkzeug.exceptions import PreconditionFailed as _PreconditionFailed


class InvalidVisaType(BadRequest):
    description = "Invalid visa type."


class ApplicationNotFound(NotFound):
    description = "Application not found."


class DocumentNotFound(NotFound):
    description = "Document not found or does not belong to this application."


class QuotaExceeded(Conflict):
    description = (
        "Maximum number of applications reached. "
        "Please complete or cancel existing applications first."
    )


class Immutable(Forbidden):
    description = (
        "Cannot modify approved applications or applications with scheduled appointments."
    )


class NotEligible(Forbidden):
    description = "Application is not eligible for appointment scheduling."


class PreconditionFailed(_PreconditionFailed):
    description = "All documents must be verified before approving the application."
