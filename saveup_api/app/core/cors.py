"""
CORS middleware whose preflight answer is always 200.

Starlette's ``CORSMiddleware`` rejects a preflight from an origin that
is not allowed with a 400.  Clients of this API expect every
``OPTIONS`` request to succeed; the browser still blocks the real
request because ``Access-Control-Allow-Origin`` is only sent for
allowed origins.
"""

from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse, Response


class PreflightCORSMiddleware(CORSMiddleware):
    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers=request_headers)
        if response.status_code == 200:
            return response
        headers = {
            name: value
            for name, value in response.headers.items()
            if name.startswith("access-control-") or name == "vary"
        }
        return PlainTextResponse("OK", status_code=200, headers=headers)
