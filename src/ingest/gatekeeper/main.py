"""Gateway FastAPI service for LINE webhook ingestion and content distribution."""

import datetime
from contextlib import asynccontextmanager

import newrelic.agent

from src.utils.config import get_app_environment, get_new_relic_license_key, load_env_file

load_env_file()

if get_new_relic_license_key():
    newrelic.agent.initialize(environment=get_app_environment())

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.content.store import ContentStore, ImageStore
from src.distribution.notifier import build_notifier
from src.ingest.errors import ContentGatewayError, InternalError
from src.ingest.gatekeeper.models import HealthEnv, HealthResponse
from src.ingest.gatekeeper.routes import router as webhook_router
from src.ingest.pipeline import PipelineConfig, PipelineServices
from src.ingest.services.image_retriever import build_image_retriever
from src.ingest.services.text_enricher import build_text_enricher
from src.utils.config import get_client_url, get_gateway_port
from src.utils.logging import get_logger, get_uvicorn_log_config

logger = get_logger(__name__)


def build_pipeline_services(config: PipelineConfig) -> PipelineServices:
    """Create the process-wide stores, enrichment services and notifier."""
    image_store = ImageStore()
    return PipelineServices(
        content_store=ContentStore(),
        image_store=image_store,
        text_enricher=build_text_enricher(config.openai_api_key),
        image_retriever=build_image_retriever(config.channel_access_token, image_store),
        notifier=build_notifier(config.distribution_mode),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services on startup and handle graceful shutdown."""
    logger.info("🚀 Starting content gateway...")

    owns_services = getattr(app.state, "pipeline_services", None) is None
    if owns_services:
        config = PipelineConfig.from_env()
        app.state.pipeline_config = config
        app.state.pipeline_services = build_pipeline_services(config)

    config = app.state.pipeline_config
    if not config.channel_secret:
        logger.warning("⚠️ LINE_CHANNEL_SECRET is not set. Webhook signatures will NOT be verified!")
    if not config.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set. Text enrichment is disabled")
    if not config.channel_access_token:
        logger.warning("LINE_CHANNEL_ACCESS_TOKEN is not set. Image messages cannot be downloaded")

    logger.info("✅ Content gateway startup complete", distribution_mode=config.distribution_mode)

    yield

    logger.info("🛑 Shutting down content gateway...")
    if owns_services:
        await app.state.pipeline_services.close()
    logger.info("✅ Content gateway shutdown complete")


async def content_gateway_error_handler(request: Request, exc: ContentGatewayError) -> JSONResponse:
    if isinstance(exc, InternalError):
        newrelic.agent.notice_error(error=(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    newrelic.agent.notice_error(error=(type(exc), exc, exc.__traceback__))
    logger.error("Unhandled error", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    config: PipelineConfig | None = None,
    services: PipelineServices | None = None,
) -> FastAPI:
    """Build the gateway app.

    Services are normally created in the lifespan; passing them here (as tests do) skips that,
    and the caller stays responsible for closing them.
    """
    app = FastAPI(
        title="LINE Content Gateway",
        description="LINE webhook ingestion with AI enrichment and moderation dashboard distribution",
        version="1.0.0",
        lifespan=lifespan,
    )

    if services is not None:
        app.state.pipeline_config = config or PipelineConfig()
        app.state.pipeline_services = services

    client_url = get_client_url()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[client_url] if client_url else ["*"],
        allow_credentials=bool(client_url),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "x-line-signature"],
    )

    app.add_exception_handler(ContentGatewayError, content_gateway_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/")
    async def root():
        return {
            "message": "LINE Content Gateway API",
            "status": "running",
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Report which credentials are configured, never their values."""
        pipeline_services: PipelineServices = request.app.state.pipeline_services
        return HealthResponse(
            ok=True,
            env=HealthEnv(
                **request.app.state.pipeline_config.credential_flags(),
                clientUrl=get_client_url(),
                distributionMode=pipeline_services.notifier.mode,
            ),
            contentCount=len(pipeline_services.content_store),
        )

    @app.get("/health/live")
    async def liveness_check():
        """Liveness probe endpoint - checks if the application is alive."""
        return {
            "status": "alive",
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
        }

    app.include_router(webhook_router)
    return app


app = create_app()


def main() -> None:
    """Run the gateway service."""
    import uvicorn

    uvicorn.run(
        "src.ingest.gatekeeper.main:app",
        host="0.0.0.0",
        port=get_gateway_port(),
        log_config=get_uvicorn_log_config(),
    )


if __name__ == "__main__":
    main()
