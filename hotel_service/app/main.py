# app/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, engine
from shared.helpers.exception_handler import setup_exception_handlers
from shared.wrappers.response_wrapper import JsonResponseMiddleware
from shared.models import audit_logs, roles, staff, users
from .models.hospitality import guests, reservations, room_types, rooms, saved_rooms
from .models.financials import payments
from .router.hospitality import guests_router, reservations_router, rooms_router
from .router.financials import payments_router, reports_router
from .router.access_control import audit_logs_router, staff_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Create all tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title=f"{settings.APP_NAME} - Hotel Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom JSON response wrapper middleware
app.add_middleware(JsonResponseMiddleware)

# Register exception handlers
setup_exception_handlers(app)

# Include routers
app.include_router(guests_router.router)
app.include_router(rooms_router.router)
app.include_router(reservations_router.router)
app.include_router(payments_router.router)
app.include_router(reports_router.router)
app.include_router(audit_logs_router.router)
app.include_router(staff_router.router)


@app.get("/api/health")
def health():
    return {"status": "healthy", "service": "hotel"}
