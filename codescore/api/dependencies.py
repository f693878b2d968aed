from fastapi import HTTPException, Request

from codescore.core.errors import AdapterError, ErrorKind
from codescore.services.profile_service import ProfileService

ERROR_STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.TRANSIENT: 503,
    ErrorKind.PARSE_FAILURE: 502,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UNSUPPORTED: 400,
}


def get_profile_service(request: Request) -> ProfileService:
    service = getattr(request.app.state, "profile_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Profile service is not ready.")
    return service


def adapter_http_error(error: AdapterError) -> HTTPException:
    headers = None
    retry_after = getattr(error, "retry_after", None)
    if retry_after is not None:
        headers = {"Retry-After": str(int(retry_after) + 1)}
    return HTTPException(
        status_code=ERROR_STATUS_CODES.get(error.kind, 500),
        detail={"error": error.kind.value, "message": str(error), "platform": error.platform},
        headers=headers,
    )
