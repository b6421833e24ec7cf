"""Cross-origin headers applied to every response, including errors and preflight."""
from fastapi import Request, Response, status

from clone_api.config.settings import Settings

ALLOW_METHODS = "GET,POST,OPTIONS"
ALLOW_HEADERS = "Content-Type,Authorization"


def apply_cors_headers(response: Response, settings: Settings) -> Response:
    response.headers["Access-Control-Allow-Origin"] = settings.cors_allow_origin
    response.headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
    response.headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
    response.headers["Vary"] = "Origin"
    return response


async def handle_cors(request: Request, call_next):
    """
    Answer preflight requests directly and decorate everything else on the way out.

    Registered as the outermost HTTP middleware so that responses produced by
    the broad-exception handler are decorated as well.
    """
    settings: Settings = request.app.state.settings
    if request.method == "OPTIONS":
        return apply_cors_headers(Response(status_code=status.HTTP_204_NO_CONTENT), settings)
    response = await call_next(request)
    return apply_cors_headers(response, settings)
