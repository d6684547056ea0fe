from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def api_response(data: Any = None, message: str = "Success", status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Конверт успешного ответа: {statusCode, data, message, success: true}"""
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, mode="json")
    elif isinstance(data, list):
        data = [
            item.model_dump(by_alias=True, mode="json") if isinstance(item, BaseModel) else item
            for item in data
        ]

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "statusCode": status_code,
            "data": data if data is not None else {},
            "message": message,
            "success": status_code < 400,
        }),
    )
