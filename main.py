# main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backoffice.routers import auth_router, branches_router, catalog_router, inventory_router
from backoffice.core.config import LOG_LEVEL
from backoffice.core.db import init_models
from backoffice.middleware.request_logger import RequestLoggerMiddleware

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Restaurant Back-office API",
    description="FastAPI backend for channel pricing, promotions and ingredient inventory",
    version="0.1.0"
)
# CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # adjust for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggerMiddleware)

# Health check endpoint
@app.get("/", tags=["Health"])
async def health_check():
    return {"status": "ok", "message": "Backend is running"}

# Register routers
app.include_router(auth_router)
app.include_router(branches_router)
app.include_router(catalog_router)
app.include_router(inventory_router)


@app.on_event("startup")
async def on_startup():
    await init_models()
