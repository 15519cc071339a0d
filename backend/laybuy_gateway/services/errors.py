"""Error taxonomy for the Laybuy integration."""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    NOT_CONFIGURED = "not_configured"
    RESOURCE_NOT_FOUND = "resource_not_found"
    UNSUPPORTED_CURRENCY = "unsupported_currency"
    TRANSPORT_FAILURE = "transport_failure"
    UNRECOGNIZED_RESPONSE = "unrecognized_response"
    PROVIDER_REJECTED = "provider_rejected"
    TOKEN_MISMATCH = "token_mismatch"
    MISSING_CORRELATION_ID = "missing_correlation_id"
    INVALID_ORDER_STATE = "invalid_order_state"


class LaybuyError(Exception):
    code: ErrorCode = ErrorCode.PROVIDER_REJECTED

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotConfiguredError(LaybuyError):
    code = ErrorCode.NOT_CONFIGURED

    def __init__(self):
        super().__init__("Plugin not configured")


class ResourceNotFoundError(LaybuyError):
    code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} cannot be loaded")


class UnsupportedCurrencyError(LaybuyError):
    code = ErrorCode.UNSUPPORTED_CURRENCY

    def __init__(self, currency_code: str):
        self.currency_code = currency_code
        super().__init__(f"Currency '{currency_code}' is not supported by Laybuy")


class TransportFailureError(LaybuyError):
    code = ErrorCode.TRANSPORT_FAILURE

    def __init__(self, detail: str):
        super().__init__(f"Laybuy service unreachable: {detail}")


class UnrecognizedResponseError(LaybuyError):
    code = ErrorCode.UNRECOGNIZED_RESPONSE

    def __init__(self, body: str):
        self.body = body
        super().__init__(f"Could not recognize response - '{body}'")


class ProviderRejectedError(LaybuyError):
    code = ErrorCode.PROVIDER_REJECTED

    def __init__(self, result: Optional[str], error_message: Optional[str] = None):
        self.result = result
        self.error_message = error_message
        super().__init__(f"Request result - {result}. \n{error_message or ''}".rstrip())


class TokenMismatchError(LaybuyError):
    code = ErrorCode.TOKEN_MISMATCH

    def __init__(self):
        super().__init__("Received order token does not match stored")


class MissingCorrelationIdError(LaybuyError):
    code = ErrorCode.MISSING_CORRELATION_ID

    def __init__(self):
        super().__init__("Order identifier not set")


class InvalidOrderStateError(LaybuyError):
    code = ErrorCode.INVALID_ORDER_STATE

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Order payment status {current} cannot move to {target}")
