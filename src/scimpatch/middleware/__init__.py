from .error_handler import ErrorHandlerMiddleware, scim_error_response
from .request_logger import RequestLoggingMiddleware, filter_parameters

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestLoggingMiddleware",
    "scim_error_response",
    "filter_parameters",
]
