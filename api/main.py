# api/main.py
import logging
import os
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from api.routes import books_router, borrowings_router, reservations_router, users_router
from core.errors import (
    CirculationError, Unauthorized, NotFound, InvalidTransition, NoCopiesAvailable,
    RenewalLimitReached, DuplicateReservation, AlreadyBorrowed, BookInUse, BookAvailable
)
from core.sa.database import get_database

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="University Library Circulation", version="0.1.0")

# CORS configuration
DEFAULT_ORIGINS = [
    "http://localhost:5173",        # Local Vite dev server
    "http://localhost:4173",        # Local Vite preview
    "http://127.0.0.1:5173",
    "http://localhost",             # Local production URL
]
origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()] or DEFAULT_ORIGINS

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS = {
    Unauthorized: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidTransition: status.HTTP_409_CONFLICT,
    NoCopiesAvailable: status.HTTP_409_CONFLICT,
    RenewalLimitReached: status.HTTP_409_CONFLICT,
    DuplicateReservation: status.HTTP_409_CONFLICT,
    AlreadyBorrowed: status.HTTP_409_CONFLICT,
    BookInUse: status.HTTP_409_CONFLICT,
    BookAvailable: status.HTTP_409_CONFLICT,
}

@app.exception_handler(CirculationError)
async def circulation_error_handler(request: Request, exc: CirculationError):
    code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=code, content={"detail": exc.message, "code": exc.code})

@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc), "code": "invalid"})

# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    get_database().init_db()

@app.get("/health")
async def health():
    return {"ok": True}

app.include_router(books_router)
app.include_router(borrowings_router)
app.include_router(reservations_router)
app.include_router(users_router)

# Main execution
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Enable auto-reload
        reload_dirs=["api", "core"]  # Watch both api and core directories for changes
    )
