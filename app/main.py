# app/main.py
from fastapi import FastAPI
from app.config import settings
from app.database import engine, Base
from app.models.catalog import ScorecardRole, ScorecardMetric
from app.models.weekly_data import WeeklyDataRecord
from app.models.summary import MonthlySummaryRecord, MetricScoreRecord, CompanySummaryRecord
from app.routers import scorecard
import logging
from sqlalchemy import exc as sa_exc

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Performance Scorecard Engine", version="1.0")

# Include Routers
app.include_router(scorecard.router)

# Create DB Tables (for local runs; use Alembic in prod)
@app.on_event("startup")
async def startup_event():
    # ignore duplicate-object errors from previous partial runs
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logging.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

@app.get("/")
def read_root():
    return {"message": "Performance Scorecard Engine"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
