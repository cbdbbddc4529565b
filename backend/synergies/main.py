from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from synergies.core.config import settings
from synergies.core.logging_config import configure_logging
import synergies.models  # noqa: F401  # force model registration

from synergies.api.v1.auth import router as auth_router
from synergies.api.v1.employees import router as employees_router
from synergies.api.v1.recommendations import router as recommendations_router
from synergies.api.v1.notes import router as notes_router
from synergies.api.v1.admin import router as admin_router
from synergies.api.v1.commissions import router as commissions_router
from synergies.api.v1.teams import router as teams_router
from synergies.api.v1.suggestions import router as suggestions_router
from synergies.api.v1.email import router as email_router
from synergies.api.v1.cron import router as cron_router


def create_application() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Synergies API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {"status": "ok", "service": "synergies"}

    # Routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(recommendations_router, prefix="/api/v1")
    app.include_router(notes_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")
    app.include_router(commissions_router, prefix="/api/v1")
    app.include_router(teams_router, prefix="/api/v1")
    app.include_router(suggestions_router, prefix="/api/v1")
    app.include_router(email_router, prefix="/api/v1")
    app.include_router(cron_router, prefix="/api/v1")

    return app


app = create_application()
