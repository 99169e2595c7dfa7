from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cypress_extractor.routes import analyze, analyze_project, health
from cypress_extractor.middleware.audit import AuditMiddleware
from cypress_extractor.core.logging import setup_logging, logger
from cypress_extractor.core.config import get_settings
from cypress_extractor.db.mongo import check_mongo_connection, close_mongo_connection

# -------------------------------------------------------
# Initialize logging ONCE at import-time
# -------------------------------------------------------
settings = get_settings()
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ok = await check_mongo_connection()
    if not ok:
        logger.warning(
            "MongoDB NOT connected at startup. "
            "API audit logs will not be stored."
        )
    yield
    close_mongo_connection()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description=(
            "Extract Cypress command definitions, command usages, tests and "
            "hooks from JavaScript test files using a Tree-sitter AST."
        ),
        lifespan=lifespan,
    )

    # -------------------------------------------------------
    # CORS configuration
    # -------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------
    # Middleware
    # -------------------------------------------------------
    app.add_middleware(AuditMiddleware)

    # -------------------------------------------------------
    # Routes
    # -------------------------------------------------------
    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(analyze.router, prefix="/analyze", tags=["Analysis"])
    app.include_router(
        analyze_project.router,
        prefix="/analyze-project",
        tags=["Analysis"],
    )

    return app


# -------------------------------------------------------
# Application instance
# -------------------------------------------------------
app = create_app()
