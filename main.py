import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import hr_admin.models  # ensure models are registered
from hr_admin.core.config import CORS_ORIGINS
from hr_admin.core.exceptions import HRAdminException
from hr_admin.core.logging_config import configure_logging
from hr_admin.initial_data import init_seed
from hr_admin.utils.database import engine, Base

from hr_admin.routers import (
    activity_logs_router,
    approval_router,
    benefits_router,
    dashboard_router,
    db_backups_router,
    employees_router,
    house_booking_router,
    loan_payments_router,
    loans_router,
    support_router,
)

configure_logging()
logger = logging.getLogger("hr_admin")

app = FastAPI(title="HR Admin Backend API", version="1.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HRAdminException)
async def hr_admin_exception_handler(request: Request, exc: HRAdminException):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.error_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Routers
app.include_router(dashboard_router.router)
app.include_router(employees_router.router)
app.include_router(activity_logs_router.router)
app.include_router(db_backups_router.router)
# payments first: its static /loans/... paths must win over /loans/{loan_id}
app.include_router(loan_payments_router.router)
app.include_router(loans_router.router)
app.include_router(approval_router.router)
app.include_router(benefits_router.router)
app.include_router(house_booking_router.router)
app.include_router(support_router.router)


@app.on_event("startup")
def on_startup():
    # DEV ONLY: production schema is managed outside the app
    Base.metadata.create_all(bind=engine)

    logger.info("Running initial database seeding")
    init_seed()
    logger.info("Seeding complete")


@app.get("/")
def root():
    return {"message": "HR Admin Backend is running!!"}
