from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

_BODY_HEADERS = {"content-length", "content-type"}


class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that answers every OPTIONS request with 204 No Content.

    Accepted preflights get the usual ``Access-Control-Allow-*`` headers;
    bare OPTIONS requests (no Origin or no requested method) get the
    allowed methods without touching the router.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "OPTIONS":
            headers = Headers(scope=scope)
            if "origin" not in headers or "access-control-request-method" not in headers:
                response = Response(
                    status_code=204,
                    headers={
                        "Allow": ", ".join(self.allow_methods),
                        "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
                    },
                )
                await response(scope, receive, send)
                return
        await super().__call__(scope, receive, send)

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers=request_headers)
        if response.status_code != 200:
            return response
        headers = {
            k: v for k, v in response.headers.items() if k.lower() not in _BODY_HEADERS
        }
        return Response(status_code=204, headers=headers)
