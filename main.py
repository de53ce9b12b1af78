import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from perception_survey.core.config import configure_logging, settings
from perception_survey.core.exceptions import register_exception_handlers
from perception_survey.api.routers import admin, survey
from perception_survey.storage import build_store

configure_logging()
logger = logging.getLogger(__name__)


# =====================================================================
# CREATE APP
# =====================================================================

app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    description="Client Perception Survey API",
    version="1.0.0",
)

# =====================================================================
# CORS MIDDLEWARE - MUST BE FIRST!
# =====================================================================

origins = settings.CORS_ORIGINS

logger.info(f"CORS allowed origins: {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

register_exception_handlers(app)

# =====================================================================
# STORE SELECTION (capability check runs once at startup)
# =====================================================================


@app.on_event("startup")
async def select_store():
    app.state.store = build_store(settings)
    logger.info(f"Survey store: {app.state.store.name}")


# =====================================================================
# HEALTH CHECK (before routers)
# =====================================================================


@app.get("/health")
def health_check():
    """Health check endpoint."""
    store = getattr(app.state, "store", None)
    return {"status": "healthy", "store": store.name if store else None}


# =====================================================================
# ROUTES
# =====================================================================

app.include_router(survey.router)
app.include_router(admin.router)

# =====================================================================
# ROOT ENDPOINT
# =====================================================================


@app.get("/")
def root():
    """API root endpoint."""
    return {
        "message": "Welcome to the Client Perception Survey API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "survey": "/survey",
            "admin": "/admin",
        },
    }
