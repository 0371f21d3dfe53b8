# buzzly/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from buzzly.core.config import settings
from buzzly.core.middleware import register_middleware
from buzzly.errors import register_all_errors
from buzzly.db.session import create_tables, dispose_engine
from buzzly.api.routers import (
    auth,
    users,
    posts,
    comments,
    likes,
    notifications,
    reports,
    admin,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Lifespan manager for startup and shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    # On startup
    logger.info("Starting up...")
    await create_tables()
    yield
    # On shutdown
    logger.info("Shutting down...")
    await dispose_engine()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Backend for the Buzzly social network and its moderation queue.",
    version="0.1.0",
    lifespan=lifespan,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)


# CORS, trusted hosts and request logging
register_middleware(app)
register_all_errors(app)

# Prometheus HTTP metrics at /metrics, alongside the report counters
Instrumentator().instrument(app).expose(app)


# Include API Routers
api_prefix = settings.API_V1_STR
app.include_router(auth.router, prefix=f"{api_prefix}/auth", tags=["Auth"])
app.include_router(admin.router, prefix=f"{api_prefix}/admin", tags=["Admin"])
app.include_router(users.router, prefix=f"{api_prefix}/users", tags=["Users"])
app.include_router(posts.router, prefix=f"{api_prefix}/posts", tags=["Posts"])
app.include_router(comments.router, prefix=f"{api_prefix}/posts/{{post_id}}/comments", tags=["Comments"])
app.include_router(likes.router, prefix=f"{api_prefix}/likes", tags=["Likes"])
app.include_router(notifications.router, prefix=f"{api_prefix}/notifications", tags=["Notifications"])
app.include_router(reports.router, prefix=f"{api_prefix}/reports", tags=["Reports"])


@app.get("/", tags=["Health Check"])
async def root():
    """Health check endpoint."""
    return {"message": "Buzzly API is running!"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("buzzly.main:app", host="0.0.0.0", port=10000, reload=True)
