from fastapi import Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class ImageServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ImageServiceError):
    """Request rejected before any external call"""
    status_code = status.HTTP_400_BAD_REQUEST


class MissingFileError(ValidationError):
    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class StoreError(ImageServiceError):
    """Object storage write or delete failed"""


class PersistenceError(ImageServiceError):
    """Database read or write failed"""


async def validation_exception_handler(request: Request, exc: ValidationError):
    logger.warning(
        "Upload rejected",
        path=request.url.path,
        error_type=exc.__class__.__name__,
        error=exc.message
    )
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def image_service_exception_handler(request: Request, exc: ImageServiceError):
    logger.error(
        "Request failed",
        path=request.url.path,
        method=request.method,
        error_type=exc.__class__.__name__,
        error=exc.message
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def form_validation_exception_handler(request: Request, exc: RequestValidationError):
    """A non-file value in the ``image`` field counts as no file at all"""
    for error in exc.errors():
        loc = error.get("loc", ())
        if len(loc) >= 2 and loc[0] == "body" and loc[1] == "image":
            return await validation_exception_handler(request, MissingFileError())
    return await request_validation_exception_handler(request, exc)
