from brotli_asgi import BrotliMiddleware
from fastapi import FastAPI

from core.exceptions import ConflictException
from core.exceptions import InvalidStateException
from core.exceptions import NoCandidateException
from core.exceptions import NotFoundException
from core.exceptions import ReviewerNotAssignedException
from core.exceptions import ServiceException
from core.exceptions import TeamExistsException
from core.logs import get_logger
from core.logs import setup_logging
from db import create_tables
from db import get_database
from services.api.utils import error_content
from services.api.utils import ORJSONResponse
from services.api.v1.pull_requests.endpoints import router as pull_requests_router
from services.api.v1.teams.endpoints import router as teams_router
from services.api.v1.users.endpoints import router as users_router

logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    TeamExistsException: 400,
    NotFoundException: 404,
    ConflictException: 409,
    InvalidStateException: 409,
    ReviewerNotAssignedException: 409,
    NoCandidateException: 409,
}


app = FastAPI(
    title="Reviewer assignment service",
    default_response_class=ORJSONResponse,
    docs_url="/docs",
    openapi_url="/openapi.json",
)
app.add_middleware(BrotliMiddleware)

app.include_router(teams_router, prefix="/team", tags=["Teams"])
app.include_router(users_router, prefix="/users", tags=["Users"])
app.include_router(pull_requests_router, prefix="/pullRequest", tags=["PullRequests"])


def get_status_code(exc: ServiceException) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


@app.exception_handler(ServiceException)
async def service_exception_handler(request, exc: ServiceException):
    status_code = get_status_code(exc)
    logger.info("request rejected", path=request.url.path, code=exc.code, status_code=status_code)

    return ORJSONResponse(content=error_content(exc.code, str(exc)), status_code=status_code)


@app.exception_handler(Exception)
async def internal_exception_handler(request, exc):
    logger.exception("request failed", path=request.url.path, method=request.method)

    return ORJSONResponse(content=error_content("INTERNAL", "internal server error"), status_code=500)


@app.on_event("startup")
async def startup():
    setup_logging()
    await get_database().connect()
    await create_tables(get_database())


@app.on_event("shutdown")
async def shutdown():
    await get_database().disconnect()
