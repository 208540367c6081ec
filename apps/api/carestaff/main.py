import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from carestaff.core.config import settings
from carestaff.core.database import SessionLocal
from carestaff.models import registry  # noqa: F401
from carestaff.routers.auth import router as auth_router
from carestaff.routers.admin import router as admin_router
from carestaff.routers.shift_types import router as shift_types_router
from carestaff.routers.payment_configs import router as payment_configs_router
from carestaff.routers.staff_rates import router as staff_rates_router
from carestaff.routers.availability import router as availability_router
from carestaff.routers.scheduling_rules import router as scheduling_rules_router
from carestaff.routers.rotation_patterns import router as rotation_patterns_router
from carestaff.routers.navigation import router as navigation_router
from carestaff.routers.notifications import router as notifications_router
from carestaff.services.notifications import check_notification_configuration
from carestaff.services.scheduling_rules import ensure_system_rules_exist
from carestaff.services.shift_types import ensure_system_templates_exist

logging.basicConfig(
  level=settings.log_level.upper(),
  format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
  # System templates and rules are reference data; a failure here is logged, not fatal.
  db = SessionLocal()
  try:
    ensure_system_templates_exist(db)
    ensure_system_rules_exist(db)
  except Exception:
    db.rollback()
    logger.exception("Could not ensure system shift templates and rules")
  finally:
    db.close()
  check_notification_configuration()
  yield


app = FastAPI(title="CareStaff API", lifespan=lifespan)

# Comma-separated list, e.g.:
# CORS_ORIGINS="http://localhost:3000,https://portal.example.com"
allow_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]

# Safe fallback for local dev if env var not set
if not allow_origins:
  allow_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
  ]

app.add_middleware(
  CORSMiddleware,
  allow_origins=allow_origins,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])
app.include_router(shift_types_router, prefix="/shift-types", tags=["shift-types"])
app.include_router(payment_configs_router, prefix="/payment-configs", tags=["payment-configs"])
app.include_router(staff_rates_router, prefix="/staff-rates", tags=["staff-rates"])
app.include_router(availability_router, prefix="/employee-availability", tags=["employee-availability"])
app.include_router(scheduling_rules_router, prefix="/scheduling-rules", tags=["scheduling-rules"])
app.include_router(rotation_patterns_router, prefix="/rotation-patterns", tags=["rotation-patterns"])
app.include_router(navigation_router, prefix="/navigation", tags=["navigation"])
app.include_router(notifications_router, prefix="/notifications", tags=["notifications"])

@app.get("/health")
def health():
  return {"status": "ok"}
