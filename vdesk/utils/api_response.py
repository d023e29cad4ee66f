from typing import Any, Dict, Optional

from starlette.responses import JSONResponse
from starlette import status

from vdesk.schemas.response import ApiResponse


def _body(data: Any, message: Optional[str], results: Optional[int]) -> Dict[str, Any]:
    body = ApiResponse[Any](message=message, results=results, data=data).model_dump(mode="json", by_alias=True)
    # ``data`` stays in the envelope even when null
    return {k: v for k, v in body.items() if v is not None or k == "data"}

def ok(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
    headers: Optional[Dict[str, str]] = None,
    results: Optional[int] = None,
):
    return JSONResponse(content=_body(data, message, results), status_code=status_code, headers=headers)

def created(
    data: Any = None,
    message: str = "Created",
    headers: Optional[Dict[str, str]] = None,
):
    return JSONResponse(content=_body(data, message, None), status_code=status.HTTP_201_CREATED, headers=headers)