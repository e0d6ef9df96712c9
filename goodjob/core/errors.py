"""
Application exceptions.

Services raise these; the handlers registered in main.py turn them into
JSON responses of the form {"detail": "..."}.

    HttpError                    -> explicit status (mostly 401 / 403 / 422)
    ObjectIdError                -> 422
    DuplicateKeyError            -> 409
    ObjectNotExistError          -> 404
    SalaryValidationError        -> 422
    EmailTemplateTypeError       -> 500
    EmailTemplateVariablesError  -> 500
"""

from typing import Any


class GoodJobError(Exception):
    """Base class for every error raised by this application."""

    status_code: int = 500

    def __init__(self, message: Any = ""):
        super().__init__(message)
        self.message = message


class HttpError(GoodJobError):
    """An error that already knows which HTTP status it maps to."""

    def __init__(self, message: Any, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ObjectIdError(GoodJobError):
    status_code = 422


class DuplicateKeyError(GoodJobError):
    status_code = 409


class ObjectNotExistError(GoodJobError):
    status_code = 404


class SalaryValidationError(GoodJobError):
    status_code = 422


class EmailTemplateTypeError(GoodJobError):
    pass


class EmailTemplateVariablesError(GoodJobError):
    pass
