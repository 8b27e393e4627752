"""ASGI middleware: request id."""

from agencyflow.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
