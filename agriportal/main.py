import logging
import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError, DataError

from agriportal.api.v1.router import api_router
from agriportal.core.config import settings
from agriportal.core.logging_config import configure_logging
from agriportal.db.init_db import init_database
from agriportal.db.session import engine
from agriportal.services.realtime import NotificationBroker
from agriportal.services.storage_service import get_uploads_dir

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    tags_metadata = [
        {"name": "auth", "description": "Đăng ký, đăng nhập và cấp token"},
        {"name": "projects", "description": "Dự án gọi vốn cho nông dân"},
        {"name": "investments", "description": "Đầu tư vào dự án"},
        {"name": "ratings", "description": "Đánh giá dự án và bảng xếp hạng"},
        {"name": "notifications", "description": "Thông báo và kênh thời gian thực"},
        {"name": "posts", "description": "Bài viết cộng đồng"},
        {"name": "products", "description": "Sản phẩm nông nghiệp"},
        {"name": "salinity", "description": "Dự báo độ mặn"},
        {"name": "follows", "description": "Theo dõi người dùng và dự án"},
        {"name": "admin", "description": "Quản trị và kiểm duyệt nội dung"},
    ]

    try:
        settings.validate_security()
    except ValueError as e:
        logger.warning("SECURITY WARNING: %s", e)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Cổng thông tin nông nghiệp Đồng bằng sông Cửu Long",
        openapi_url="/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=tags_metadata,
        redirect_slashes=False,
    )
    app.state.notification_broker = NotificationBroker()

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        """Handle database integrity errors (unique constraints, foreign keys)"""
        error_msg = str(exc.orig) if exc.orig else str(exc)
        lowered = error_msg.lower()
        if "unique" in lowered:
            detail = "Dữ liệu đã tồn tại"
            status_code = 409
        elif "foreign key" in lowered:
            detail = "Dữ liệu liên quan không tồn tại"
            status_code = 400
        else:
            detail = "Lỗi cơ sở dữ liệu"
            status_code = 400
        logger.warning("Integrity error at %s: %s", request.url.path, error_msg)
        return JSONResponse(status_code=status_code, content={"detail": detail})

    @app.exception_handler(DataError)
    async def data_error_handler(request: Request, exc: DataError):
        """Handle database data errors (invalid types, values too long)"""
        return JSONResponse(status_code=400, content={"detail": "Dữ liệu không hợp lệ"})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Flatten pydantic validation errors into 'field: message' strings"""
        errors = []
        for error in exc.errors():
            field = ".".join(str(x) for x in error["loc"] if x != "body")
            errors.append(f"{field}: {error['msg']}")
        return JSONResponse(
            status_code=422,
            content={"detail": "Dữ liệu không hợp lệ", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error at %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Đã xảy ra lỗi không mong muốn"},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH", "HEAD"],
        allow_headers=["*"],
        max_age=3600,
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        if not settings.INIT_DB_ON_STARTUP:
            logger.info("Skipping database initialization")
            return
        await init_database(engine)
        from agriportal.core.seed import seed_database
        await seed_database()

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        openapi_schema.setdefault("components", {}).setdefault("securitySchemes", {}).update({
            "bearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
            }
        })
        openapi_schema["security"] = [{"bearerAuth": []}]
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[assignment]

    app.include_router(api_router, prefix=settings.API_V1_STR)

    # Uploaded images are served from /uploads/{bucket}/{user_id}/{file}
    uploads_dir = get_uploads_dir()
    os.makedirs(uploads_dir, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=uploads_dir), name="uploads")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "message": f"{settings.PROJECT_NAME} is running"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("agriportal.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=False)
