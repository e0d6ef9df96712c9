"""
GoodJob WorkTime Survey - Main Application

FastAPI backend with:
- MongoDB for every collection
- REST endpoints (auth, workings, experiences, jobs, me)
- GraphQL (strawberry) at /graphql
- JWT authentication issued after Facebook / Google login

Run: uvicorn goodjob.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from goodjob import __version__
from goodjob.api.routes import api_router
from goodjob.core.config import get_settings
from goodjob.core.errors import GoodJobError
from goodjob.core.log import configure_logging
from goodjob.db.mongodb import init_mongo_indexes, test_mongo_connection
from goodjob.graphql.schema import create_graphql_router
from goodjob.schemas.schemas import HealthResponse

logger = logging.getLogger(__name__)

settings = get_settings()

# Create FastAPI app
app = FastAPI(
    title="GoodJob WorkTime Survey",
    description="""
    Salary / working-time and experience sharing platform.

    ## Features
    - **Authentication**: Facebook / Google login, JWT for every other call
    - **Workings**: Salary and working-time records with wage estimates
    - **Experiences**: Work and interview experiences
    - **GraphQL**: Company / job title pages, statistics and search
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GoodJobError)
async def goodjob_error_handler(request: Request, exc: GoodJobError):
    """Every application error becomes {"detail": message} with its status."""
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Include API routes
app.include_router(api_router)
app.include_router(create_graphql_router(), prefix="/graphql")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Set up logging and MongoDB indexes on startup."""
    configure_logging()
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
