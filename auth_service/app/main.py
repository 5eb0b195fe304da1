# app/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, engine
from shared.helpers.exception_handler import setup_exception_handlers
from shared.wrappers.response_wrapper import JsonResponseMiddleware
from shared.models import audit_logs, roles, staff, users
# guest profiles are created at registration, their relationships need the hotel models
from hotel_service.app.models.hospitality import guests, reservations, room_types, rooms, saved_rooms
from hotel_service.app.models.financials import payments
from .routers import authrouter, role_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Create tables
Base.metadata.create_all(bind=engine)

# This MUST exist for uvicorn
app = FastAPI(title=f"{settings.APP_NAME} - Auth Service")

# 1️⃣ CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 2️⃣ Custom JSON response wrapper middleware
app.add_middleware(JsonResponseMiddleware)

# Register exception handlers
setup_exception_handlers(app)

# Routers
app.include_router(authrouter.router)
app.include_router(role_router.router)


@app.get("/api/auth/health")
def health():
    return {"status": "healthy", "service": "auth"}
