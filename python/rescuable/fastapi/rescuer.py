"""Per-request rescue subject for FastAPI applications."""

from typing import Any, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..rescuable import Rescuable


class ErrorBody(BaseModel):
    """JSON body rendered by ``RequestRescuer.render_error``."""

    error: str
    message: str


class RequestRescuer(Rescuable):
    """Rescuable subject created for each failed request.

    Subclass it and declare handlers with ``rescue_from``; handlers turn the
    error into a response by calling ``render``, ``render_error`` or ``head``.

    ```python
    class ApiRescuer(RequestRescuer):
        @rescue_from(KeyError)
        def not_found(self, error):
            self.render_error(error, status_code=404)

    install_rescue_middleware(app, ApiRescuer)
    ```

    Attributes:
        request: The request whose handling raised
        response: Response rendered by a handler, if any
    """

    def __init__(self, request: Request) -> None:
        self.request = request
        self.response: Optional[Response] = None

    @property
    def performed(self) -> bool:
        """Whether a handler has rendered a response."""
        return self.response is not None

    def render(
        self,
        content: Any,
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """Render ``content`` as JSON. Pydantic models are dumped first."""
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json")
        self.response = JSONResponse(
            content=content, status_code=status_code, headers=headers
        )

    def render_error(self, error: BaseException, status_code: int = 500) -> None:
        """Render ``error`` as an ErrorBody with its type name and message."""
        self.render(
            ErrorBody(error=type(error).__name__, message=str(error)),
            status_code=status_code,
        )

    def head(self, status_code: int, headers: Optional[Dict[str, str]] = None) -> None:
        """Render an empty response."""
        self.response = Response(status_code=status_code, headers=headers)
