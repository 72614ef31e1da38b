"""
Punto de entrada del relay HTTP (FastAPI).
Expone los comandos del CLI de sync como endpoints POST.
"""
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from restock_sync.core.config import settings
from restock_sync.core.logging import configure_logging
from restock_sync.api.v1.router import api_router
from restock_sync.api.middlewares.error_handler import ErrorHandlerMiddleware
from restock_sync.shared.exceptions.base import AppException


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Relay HTTP para la sincronizacion Cin7 -> Postgres",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware personalizado para manejo de errores
    application.add_middleware(ErrorHandlerMiddleware)

    # Incluir routers de la API
    application.include_router(api_router, prefix="/api")

    # Manejador global de excepciones personalizadas
    @application.exception_handler(AppException)
    async def app_exception_handler(request, exc: AppException):
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @application.get("/api/health", tags=["Health"])
    async def health_check():
        """Endpoint para verificar el estado del relay."""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

    return application


# Crear instancia de la aplicación
app = create_application()


if __name__ == "__main__":
    import uvicorn
    from loguru import logger

    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    access_host = "localhost" if settings.HOST == "0.0.0.0" else settings.HOST
    logger.info(f"Relay escuchando en http://{access_host}:{settings.PORT}/api")

    uvicorn.run(
        "restock_sync.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
    )
