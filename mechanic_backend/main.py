from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mechanic_backend.core.config import settings
from mechanic_backend.core.errors import register_error_handlers
from mechanic_backend.core.logging_config import configure_logging
from mechanic_backend.routers.earnings import router as earnings_router
from mechanic_backend.routers.jobs import router as jobs_router
from mechanic_backend.routers.notifications import router as notifications_router
from mechanic_backend.routers.payments import router as payments_router
from mechanic_backend.routers.reviews import router as reviews_router
from mechanic_backend.routers.status import router as status_router

configure_logging()

app = FastAPI(title="MechanicOnDemand Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(jobs_router)
app.include_router(payments_router)
app.include_router(notifications_router)
app.include_router(reviews_router)
app.include_router(status_router)
app.include_router(earnings_router)
