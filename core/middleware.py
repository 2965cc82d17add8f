# app/core/middleware.py
from typing import Iterable

from fastapi.middleware.cors import CORSMiddleware
from starlette.types import Receive, Scope, Send


class SelectiveCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that leaves some paths to answer CORS themselves.

    Exempt routes handle their own ``OPTIONS`` preflight and send their own
    ``Access-Control-*`` headers.
    """

    def __init__(self, app, exempt_paths: Iterable[str] = (), **kwargs):
        super().__init__(app, **kwargs)
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"] in self.exempt_paths:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
