from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core import config
from .core.errors import register_exception_handlers
from .core.middleware import logging_middleware
from .utils.logging_config import setup_logging

from .auth import routers as auth_router
from .messaging import routers as messaging_router
from .businesses import routers as businesses_router
from .jobs import routers as jobs_router
from .feed import routers as feed_router
from .moderation import routers as moderation_router
from .profiles import routers as profiles_router
from .account_deletion import routers as account_deletion_router
from .admin import routers as admin_router
from .explore import routers as explore_router


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title="localhub")
    app.include_router(auth_router.router, prefix="/auth", tags=["Authentication"])
    app.include_router(messaging_router.router, prefix="/messaging", tags=["Messaging"])
    app.include_router(businesses_router.router, prefix="/businesses", tags=["Businesses"])
    app.include_router(jobs_router.router, prefix="/jobs", tags=["Jobs"])
    app.include_router(feed_router.router, prefix="/feed", tags=["Feed"])
    app.include_router(moderation_router.router, prefix="/moderation", tags=["Moderation"])
    app.include_router(profiles_router.router, prefix="/profiles", tags=["Profiles"])
    app.include_router(
        account_deletion_router.router, prefix="/account-deletion", tags=["Account Deletion"]
    )
    app.include_router(admin_router.router, prefix="/admin", tags=["Admin"])
    app.include_router(explore_router.router, prefix="/explore", tags=["Explore"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(logging_middleware)

    register_exception_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
