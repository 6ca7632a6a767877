"""FastAPI integration for rescue handlers."""

from .middleware import create_rescue_middleware, install_rescue_middleware
from .rescuer import ErrorBody, RequestRescuer

__all__ = [
    "ErrorBody",
    "RequestRescuer",
    "create_rescue_middleware",
    "install_rescue_middleware",
]
