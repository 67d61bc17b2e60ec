from fastapi import APIRouter
from fastapi.responses import ORJSONResponse

__all__ = ["ORJSONResponse", "get_router", "error_content"]


def get_router(**kwargs) -> APIRouter:
    return APIRouter(default_response_class=ORJSONResponse, **kwargs)


def error_content(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}
