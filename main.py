import logging
import os
from datetime import datetime
from typing import List, Optional

from fastapi import Body, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

import analytics
from schemas import (
    Entry,
    JournalInsight,
    MoodTrend,
    QuickStats,
    StreakResponse,
    TagAnalysis,
    WeeklyStats,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Journal Insights API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------- Routes ----------

@app.get("/")
def read_root():
    return {"message": "Journal Insights API running"}


@app.get("/schema")
def get_schema():
    return {
        "entry": Entry.model_json_schema(),
        "mood_trend": MoodTrend.model_json_schema(),
        "tag_analysis": TagAnalysis.model_json_schema(),
        "journal_insight": JournalInsight.model_json_schema(),
        "weekly_stats": WeeklyStats.model_json_schema(),
        "quick_stats": QuickStats.model_json_schema(),
    }


@app.post("/analytics/trends", response_model=List[MoodTrend])
def mood_trends(
    entries: List[Entry] = Body(..., description="Entries of a single user, newest first"),
    days: int = Query(7, ge=1, le=365, description="Window size in days, ending today"),
    reference: Optional[datetime] = Query(None, description="Reference datetime used as now"),
):
    logger.info("Mood trends requested for %d entries over %d days", len(entries), days)
    return analytics.calculate_mood_trends(entries, days, reference)


@app.post("/analytics/tags", response_model=List[TagAnalysis])
def top_tags(
    entries: List[Entry] = Body(..., description="Entries of a single user, newest first"),
    limit: int = Query(5, ge=1, le=50),
):
    logger.info("Top tags requested for %d entries (limit %d)", len(entries), limit)
    return analytics.analyze_top_tags(entries, limit)


@app.post("/analytics/streak", response_model=StreakResponse)
def writing_streak(
    entries: List[Entry] = Body(..., description="Entries of a single user, newest first"),
    reference: Optional[datetime] = Query(None, description="Reference datetime used as now"),
):
    logger.info("Writing streak requested for %d entries", len(entries))
    return StreakResponse(streak=analytics.calculate_writing_streak(entries, reference))


@app.post("/analytics/insights", response_model=List[JournalInsight])
def insights(
    entries: List[Entry] = Body(..., description="Entries of a single user, newest first"),
    reference: Optional[datetime] = Query(None, description="Reference datetime used as now"),
):
    logger.info("Insights requested for %d entries", len(entries))
    return analytics.generate_insights(entries, reference)


@app.post("/analytics/weekly", response_model=WeeklyStats)
def weekly_stats(
    entries: List[Entry] = Body(..., description="Entries of a single user, newest first"),
    reference: Optional[datetime] = Query(None, description="Reference datetime used as now"),
):
    logger.info("Weekly stats requested for %d entries", len(entries))
    return analytics.get_weekly_stats(entries, reference)


@app.post("/analytics/quick-stats", response_model=QuickStats)
def quick_stats(
    entries: List[Entry] = Body(..., description="Entries of a single user, newest first"),
    reference: Optional[datetime] = Query(None, description="Reference datetime used as now"),
):
    logger.info("Quick stats requested for %d entries", len(entries))
    return analytics.get_quick_stats(entries, reference)


@app.post("/entries/search", response_model=List[Entry])
def search(
    entries: List[Entry] = Body(..., description="Entries of a single user, newest first"),
    q: str = Query("", description="Case-insensitive text matched against content, context and tags"),
):
    results = analytics.search_entries(entries, q)
    logger.info("Search matched %d of %d entries", len(results), len(entries))
    return results


@app.post("/entries/review", response_model=List[Entry])
def entries_for_review(
    entries: List[Entry] = Body(..., description="Entries of a single user, newest first"),
    days_since_review: int = Query(7, ge=0),
    limit: int = Query(3, ge=1, le=50),
    reference: Optional[datetime] = Query(None, description="Reference datetime used as now"),
):
    logger.info("Review selection requested for %d entries", len(entries))
    return analytics.get_entries_for_review(entries, days_since_review, limit, reference)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
