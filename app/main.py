from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.errors import BookingError, SERVER_ERROR_MESSAGE
from app.api import bookings
from app.core.logger import setup_logging, logger
from app.services.db_service import create_store
from app.services.notification_service import SMTPMailer

setup_logging()

PUBLIC_DIR = Path(__file__).resolve().parent.parent / "public"
INDEX_FILE = PUBLIC_DIR / "index.html"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
}

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} for {settings.BRAND_NAME}")
    store = create_store(settings)
    await store.init()
    app.state.store = store
    app.state.mailer = SMTPMailer.from_settings(settings)
    yield
    # Shutdown
    logger.info("🛑 Shutting down backend")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response

@app.exception_handler(BookingError)
async def booking_exception_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error(f"🔥 {type(exc).__name__}: {exc.message}")
    else:
        logger.warning(f"🚫 Rejected booking: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": exc.client_message}
    )

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"🔥 UNHANDLED ERROR: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": SERVER_ERROR_MESSAGE}
    )

# Include routers
app.include_router(bookings.router, prefix="/api", tags=["Bookings"])

if PUBLIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=PUBLIC_DIR), name="static")

@app.get("/{full_path:path}", include_in_schema=False)
async def serve_front_end(full_path: str):
    return FileResponse(INDEX_FILE)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
