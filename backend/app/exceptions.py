"""
Errors raised by the services.

Only two kinds reach the HTTP layer:

- ValidationError -> 400, the request is missing something we need
- StoreError      -> 500, the datastore call failed

Both carry a human readable message that ends up in the `{"error": ...}` body.
"""


class FlowApiError(Exception):
    """Base class for every error the API turns into a JSON response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FlowApiError):
    """A required request field is absent (or unusable)."""

    status_code = 400


class StoreError(FlowApiError):
    """A datastore read or write failed."""

    status_code = 500
