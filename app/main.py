import logging
from fastapi import FastAPI

from app.api.routes import costs, schedules
from app.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Rota API", version="0.1.0", debug=settings.DEBUG)

app.include_router(schedules.router, prefix="/api/v1")
app.include_router(costs.router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "ok"}
