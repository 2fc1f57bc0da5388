"""SmithMatch Backend, FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import FRONTEND_URL, LOG_LEVEL
from backend.routes import convert, matching, trace

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="SmithMatch API",
    description="Smith chart impedance matching engine",
    version="0.1.0",
)

# CORS: allow frontend origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL] if FRONTEND_URL else [],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
app.include_router(convert.router, prefix="/api", tags=["Conversion"])
app.include_router(matching.router, prefix="/api", tags=["Matching"])
app.include_router(trace.router, prefix="/api", tags=["Trace"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "smithmatch-backend"}
