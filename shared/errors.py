"""
Domain errors raised by the services and rendered by the app-level
exception handler as {"error": message} with the error's status code.
"""
from typing import Dict, Optional


class UpsellError(Exception):
    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.headers = headers
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(UpsellError):
    """A required setting (provider key, bundle product, URL) is missing."""
    status_code = 500


class InvalidRequestError(UpsellError):
    status_code = 400


class NotFoundError(UpsellError):
    status_code = 404


class PaymentProviderError(UpsellError):
    """The upstream payment provider rejected or failed a call."""
    status_code = 502

    def __init__(self, message: str, provider_status: Optional[int] = None):
        super().__init__(message)
        self.provider_status = provider_status
