from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from passcode.network.database.session import db


class HTTPSessionManagerMiddleware(BaseHTTPMiddleware):
    """
    Opens the request scoped session. Units of work that must commit on their
    own (issuing and consuming passcodes) use an IsolatedSession inside it.
    """

    def __init__(
        self,
        app: ASGIApp,
        commit_on_success: bool = True,
    ):
        super().__init__(app)
        self.commit_on_success = commit_on_success

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        with db(commit_on_success=self.commit_on_success):
            response = await call_next(request)
            if response.status_code >= 400:
                db.session.rollback()

        return response
