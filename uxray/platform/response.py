from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(
    *,
    data: Optional[Any] = None,
    message: str = "Operation successful",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Wrap a payload in the envelope every uxray endpoint returns:
    status_code, status ("success" below 400, "error" otherwise), message
    and data. Pydantic models such as scan results are encoded as JSON;
    a missing payload becomes an empty object.
    """
    payload = jsonable_encoder(data) if data is not None else {}

    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "status": "success" if status_code < 400 else "error",
            "message": message,
            "data": payload,
        },
    )
