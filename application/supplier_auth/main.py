import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from supplier_auth.config.settings import AuthConfigs
from supplier_auth.logging.utils import initialize_logging, get_app_logger
from supplier_auth.middlewares.logging_middleware import AuditMiddleware

# Initialize Sentry (must be done early, before other imports)
from supplier_auth.config.sentry import init_sentry
init_sentry()

# Initialize structured logging
initialize_logging()
logger = get_app_logger('supplier_auth.main')

configs = AuthConfigs()

from supplier_auth.connections.database import create_tables
from supplier_auth.core.container import AuthComponents, build_components
from supplier_auth.middlewares.handlers import register_exception_handlers
from supplier_auth.routes import auth_router
from supplier_auth.routes.health import router as health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    components: AuthComponents = app.state.components
    logger.info(f"Starting {components.configs.APP_NAME} in {'debug' if components.configs.DEBUG else 'production'} mode")

    create_tables(components.session_factory.kw["bind"])

    cleanup = None
    if components.configs.CLEANUP_ENABLED:
        cleanup = asyncio.create_task(components.cleanup_task.run_forever())

    yield

    logger.info(f"Shutting down {components.configs.APP_NAME}")
    if cleanup is not None:
        cleanup.cancel()
        try:
            await cleanup
        except asyncio.CancelledError:
            pass
    await components.notifier.close()
    if components.engine is not None:
        components.engine.dispose()


def create_app(components: Optional[AuthComponents] = None) -> FastAPI:
    components = components or build_components(configs)
    app_configs = components.configs

    # Disable docs in production (when DEBUG=false)
    docs_url = "/docs" if app_configs.DEBUG else None
    redoc_url = "/redoc" if app_configs.DEBUG else None

    app = FastAPI(
        title="Supplier Auth",
        version=app_configs.APP_VERSION,
        lifespan=lifespan,
        docs_url=docs_url,
        redoc_url=redoc_url
    )
    app.state.components = components

    if app_configs.ALLOWED_ORIGINS and app_configs.ALLOWED_ORIGINS != "*":
        origins = [origin.strip() for origin in app_configs.ALLOWED_ORIGINS.split(",")]
    else:
        origins = ["*"]
    logger.info(f"Configuring CORS with allowed origins: {origins}")

    # Request/Audit logging middleware
    app.add_middleware(AuditMiddleware, trust_proxy_headers=app_configs.TRUST_PROXY_HEADERS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router)
    app.include_router(auth_router, prefix=app_configs.API_PREFIX)
    app.include_router(health_router, tags=["health"])

    return app


app = create_app()
