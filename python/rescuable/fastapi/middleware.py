"""HTTP middleware routing request errors through a RequestRescuer."""

import logging
from http import HTTPStatus
from typing import Awaitable, Callable, Type

from fastapi import FastAPI, Request, Response

from .rescuer import RequestRescuer

logger = logging.getLogger(__name__)


def create_rescue_middleware(
    rescuer_cls: Type[RequestRescuer],
) -> Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]:
    """Create an HTTP middleware function dispatching errors to ``rescuer_cls``.

    The middleware lets the request run normally. If the application raises,
    a ``rescuer_cls`` is built for the request and the error is dispatched to
    it:
    - handled with a rendered response: that response is returned
    - handled without rendering: an empty 204 response is returned
    - unhandled: the error is re-raised for the server to report

    Errors FastAPI already converts to responses (``HTTPException``, request
    validation errors) never reach this middleware.

    Args:
        rescuer_cls: RequestRescuer subclass declaring the rescue handlers

    Returns:
        An ``async (request, call_next)`` middleware function
    """

    async def rescue_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as error:
            rescuer = rescuer_cls(request)
            if rescuer.rescue_with_handler(error) is None:
                logger.debug(
                    f"{type(error).__name__} on {request.method} {request.url.path} "
                    f"is not handled by {rescuer_cls.__name__}"
                )
                raise

            logger.info(
                f"{type(error).__name__} on {request.method} {request.url.path} "
                f"rescued by {rescuer_cls.__name__}"
            )
            if rescuer.response is None:
                return Response(status_code=HTTPStatus.NO_CONTENT)
            return rescuer.response

    return rescue_middleware


def install_rescue_middleware(app: FastAPI, rescuer_cls: Type[RequestRescuer]) -> None:
    """Add the rescue middleware for ``rescuer_cls`` to ``app``.

    Must be called before the application starts serving requests.
    """
    if not (isinstance(rescuer_cls, type) and issubclass(rescuer_cls, RequestRescuer)):
        raise TypeError(
            f"rescuer_cls must be a RequestRescuer subclass, got {rescuer_cls!r}"
        )

    app.middleware("http")(create_rescue_middleware(rescuer_cls))
    logger.info(f"Installed rescue middleware with {rescuer_cls.__name__}")
