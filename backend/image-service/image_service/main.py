from fastapi import FastAPI, APIRouter, File, Form, UploadFile, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from prometheus_client import CONTENT_TYPE_LATEST
from contextlib import asynccontextmanager
from typing import List, Optional
import structlog
import time

from image_service import crud, schemas
from image_service.config import Settings
from image_service.database import build_engine, build_session_factory, get_db, init_db
from image_service.exceptions import (
    ImageServiceError, PersistenceError, StoreError, ValidationError,
    form_validation_exception_handler, image_service_exception_handler, validation_exception_handler
)
from image_service.filenames import build_storage_key, normalize_filename
from image_service.logging_config import configure_logging
from image_service.metrics import MetricsCollector, get_metrics
from image_service.storage import ObjectStore
from image_service.uploads import parse_user_id, read_upload

logger = structlog.get_logger(__name__)

router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


def get_metrics_collector(request: Request) -> MetricsCollector:
    return request.app.state.metrics


@router.get("/", response_class=PlainTextResponse)
async def root():
    return "Hello, World!"


@router.get("/health", response_model=schemas.HealthCheck)
async def health_check(
    db: Session = Depends(get_db),
    store: ObjectStore = Depends(get_object_store)
):
    try:
        await run_in_threadpool(crud.ping, db)
        await run_in_threadpool(store.check_connection)
    except ImageServiceError as e:
        logger.error("Health check failed", error=e.message)
        raise HTTPException(status_code=503, detail="Service unhealthy")
    return schemas.HealthCheck(status="healthy", database="connected", storage="connected")


@router.get("/metrics")
async def metrics():
    return Response(get_metrics(), media_type=CONTENT_TYPE_LATEST)


def _discard_orphan(store: ObjectStore, key: str):
    """Compensate a failed metadata insert by removing the stored object"""
    try:
        store.delete_object(key)
    except StoreError as e:
        logger.error("Orphaned object left in storage", bucket=store.bucket_name, key=key, error=e.message)


@router.post(
    "/upload",
    response_model=schemas.ImageUploadResponse,
    responses={
        400: {"model": schemas.MessageResponse},
        500: {"model": schemas.ErrorResponse},
    },
)
async def upload_image(
    image: Optional[List[UploadFile]] = File(None),
    user_id: Optional[str] = Form(None, alias="userId"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    store: ObjectStore = Depends(get_object_store),
    collector: MetricsCollector = Depends(get_metrics_collector)
):
    try:
        upload = await read_upload(image, settings)
        owner_id = parse_user_id(user_id)
    except ValidationError:
        collector.record_upload("invalid")
        raise

    filename = normalize_filename(upload.original_filename)
    key = build_storage_key(filename)

    try:
        url = await run_in_threadpool(store.put_object, key, upload.content, upload.content_type)
    except StoreError:
        collector.record_upload("store_error")
        raise

    try:
        db_image = await run_in_threadpool(
            crud.create_image,
            db,
            schemas.ImageCreate(user_id=owner_id, url=url, filename=filename)
        )
    except PersistenceError:
        collector.record_upload("persistence_error")
        await run_in_threadpool(_discard_orphan, store, key)
        raise

    collector.record_upload("success", size=upload.size)
    logger.info(
        "Image uploaded successfully",
        image_id=db_image.id,
        key=key,
        file_size=upload.size,
        user_id=owner_id
    )

    return schemas.ImageUploadResponse(
        message="Image uploaded successfully",
        image=schemas.Image.model_validate(db_image)
    )


@router.get(
    "/images",
    response_model=List[schemas.Image],
    responses={500: {"model": schemas.ErrorResponse}},
)
def list_images(db: Session = Depends(get_db)):
    return crud.list_images(db)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("Starting Image Upload Service", version=app.state.settings.api_version)
    init_db(app.state.engine)

    yield

    logger.info("Shutting down Image Upload Service")
    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None, object_store: Optional[ObjectStore] = None) -> FastAPI:
    """Build the application with its settings, database and storage wired in"""
    if settings is None:
        settings = Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.object_store = object_store if object_store is not None else ObjectStore(settings)
    app.state.metrics = MetricsCollector(enabled=settings.metrics_enabled)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        # Route templates keep label cardinality bounded
        route = request.scope.get("route")
        endpoint = route.path if route is not None else "unmatched"

        request.app.state.metrics.record_http_request(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
            duration=duration
        )

        return response

    app.add_exception_handler(RequestValidationError, form_validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(ImageServiceError, image_service_exception_handler)
    app.include_router(router)

    return app


def run():
    import uvicorn

    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
