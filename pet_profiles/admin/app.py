"""FastAPI application factory for the pet profile admin API and app proxy."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from pet_profiles import __version__
from pet_profiles.admin import dependencies
from pet_profiles.admin.routes import extension, profiles, proxy
from pet_profiles.config.settings import Settings
from pet_profiles.services.chart_generator import ChartGenerator
from pet_profiles.services.profile_dashboard import ProfileDashboardService
from pet_profiles.services.profile_submission import ProfileSubmissionService
from pet_profiles.services.shopify_graphql import ShopifyGraphQLClient
from pet_profiles.utils.logger import get_logger, new_correlation_id

logger = get_logger(__name__)


class AdminCORSMiddleware(CORSMiddleware):
    """CORS for the admin API only.

    App-proxy routes answer their own preflights and set their own CORS
    headers, so requests under ``/app-proxy`` pass straight through.
    """

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http" and scope["path"].startswith(proxy.router.prefix):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


def create_app(client: ShopifyGraphQLClient, settings: Settings) -> FastAPI:
    """Build and return the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.close()
        logger.info("Shopify client closed")

    app = FastAPI(
        title="Pet Profiles",
        version=__version__,
        docs_url="/api/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        AdminCORSMiddleware,
        allow_origins=settings.server.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def correlation_id(request: Request, call_next):
        cid = new_correlation_id()
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid
        return response

    # Wire up shared services
    dependencies.set_settings(settings)
    profiles.set_dashboard(ProfileDashboardService(client, settings), ChartGenerator())
    proxy.set_submission(ProfileSubmissionService(client))

    app.include_router(profiles.router)
    app.include_router(extension.router)
    app.include_router(proxy.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app
