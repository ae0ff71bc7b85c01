from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse, JSONResponse
from fastapi.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from prices.routers import v0
from prices.config import settings
from prices.errors import InputError, PersistenceError, ResourceError

logger = logging.getLogger(__name__)

db = settings.get_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager to handle startup and shutdown events."""
    await db.connect()
    await db.create_tables()
    yield
    await db.close()


app = FastAPI(
    title="Prices API",
    description="Service for importing and exporting product price archives",
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Add CORS middleware to allow all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v0.router, prefix="/api/v0")


@app.exception_handler(404)
async def custom_404_handler(request: Request, exc: HTTPException):
    """Custom 404 handler with helpful message directing to API docs."""
    return JSONResponse(
        status_code=404,
        content={"detail": "Resource not found. Check documentation at /docs"},
    )


@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    """Invalid upload, reported back to the client as is."""
    logger.warning(f"Rejected upload: {exc.message}")
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Database error: {exc.message}")
    return JSONResponse(status_code=500, content={"detail": "Database error"})


@app.exception_handler(ResourceError)
async def resource_error_handler(request: Request, exc: ResourceError):
    logger.error(f"Resource error: {exc.message}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint redirects to the API docs."""
    return RedirectResponse(url=settings.redirect_url, status_code=302)


@app.get("/health", tags=["Service status"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def main():
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(level=log_level)
    uvicorn.run(
        "prices.main:app",
        host=settings.host,
        port=settings.port,
        log_level=log_level,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
