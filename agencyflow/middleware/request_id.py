"""Request ID middleware (raw ASGI).

Forwards a well-formed client X-Request-ID or generates one, exposes it as
request.state.request_id and echoes it on the response. Malformed client
values are replaced so they never reach the logs.
"""

import uuid
from collections.abc import Callable

from agencyflow.shared.utils.ids import is_valid_identifier


def _header(scope: dict, name: str) -> str | None:
    want = name.lower().encode()
    for key, value in scope.get("headers", []):
        if key.lower() == want:
            return value.decode("utf-8", errors="replace").strip()
    return None


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        incoming = _header(scope, header_name)
        request_id = incoming if is_valid_identifier(incoming) else uuid.uuid4().hex
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (header_name.encode(), request_id.encode()),
                ]
            await send(message)

        await app(scope, receive, send_with_id)

    return asgi_app
