from contextlib import asynccontextmanager
from fastapi import FastAPI

from ligain.config import LOG_DIR, LOG_LEVEL
from ligain.database import create_db_and_tables
from ligain.logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging(LOG_LEVEL, LOG_DIR)
    create_db_and_tables()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Ligain",
    description="Predict football scores and compete with friends",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers
from ligain.routers import games, matches

app.include_router(matches.router, tags=["matches"])
app.include_router(games.router, tags=["games"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
