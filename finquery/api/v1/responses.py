"""Response envelope - {success, data} or {success, message, error} with mapped status codes"""

from functools import lru_cache
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter

from finquery.api.v1.schemas import ErrorDetail, ErrorResponse
from finquery.domain.exceptions import ErrorCode
from finquery.services.query_service import QueryResult

STATUS_CODES = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.FETCH_ERROR: 500,
    ErrorCode.SOURCE_UNAVAILABLE: 503,
    ErrorCode.TIMEOUT: 504,
}


@lru_cache(maxsize=None)
def _adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def serialize(data: Any, schema: Any) -> Any:
    """Validate domain objects into `schema` and dump them as camelCase JSON"""
    adapter = _adapter(schema)
    return adapter.dump_python(adapter.validate_python(data, from_attributes=True), mode="json", by_alias=True)


def envelope(result: QueryResult, schema: Any) -> JSONResponse:
    if result.success:
        return JSONResponse(content={"success": True, "data": serialize(result.data, schema)})

    error = result.error
    body = ErrorResponse(
        message=error.message,
        error=ErrorDetail(
            code=error.code.value,
            field=error.field,
            value=jsonable_encoder(error.value),
            details=error.details,
        ),
    )
    return JSONResponse(
        status_code=STATUS_CODES[error.code],
        content=body.model_dump(mode="json", exclude_none=True),
    )
