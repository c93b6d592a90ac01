"""
Journal analytics.

Pure functions over an in-memory list of entries: mood trends, tag
statistics, writing streaks, weekly stats and rule-based insights.
Nothing here performs I/O or keeps state between calls.

Every function accepts an optional ``now``. Top-level calls read the clock
once and pass the same value to everything they compute, so two
sub-results never disagree about which day is "today".
"""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from schemas import (
    Entry,
    InsightType,
    JournalInsight,
    MoodTrend,
    QuickStats,
    TagAnalysis,
    WeeklyStats,
)

logger = logging.getLogger(__name__)

MOOD_EMOJIS = {1: "😢", 2: "😕", 3: "😐", 4: "😊", 5: "😄"}
NEUTRAL_EMOJI = MOOD_EMOJIS[3]

# A mood-trend insight needs this much movement between the start and the
# end of the week.
MOOD_SHIFT_THRESHOLD = 0.5
REFLECTION_MIN_ENTRIES = 5
REFLECTION_SAMPLE_SIZE = 5


# -------- Utilities ---------

def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Snapshot the reference time as an aware datetime (naive means local)."""
    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def _in_zone(dt: datetime, now: datetime) -> datetime:
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(now.tzinfo)


def _entry_day(entry: Entry, now: datetime) -> date:
    return _in_zone(entry.created_at, now).date()


def _round1(value: float) -> float:
    return round(value * 10) / 10


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0
    return sum(values) / len(values)


def mood_emoji(mood: float) -> str:
    return MOOD_EMOJIS.get(int(round(mood)), NEUTRAL_EMOJI)


# -------- Aggregates ---------

def calculate_mood_trends(entries: Iterable[Entry], days: int = 7, now: Optional[datetime] = None) -> List[MoodTrend]:
    now = resolve_now(now)
    today = now.date()

    by_day: Dict[date, List[int]] = {}
    for entry in entries:
        by_day.setdefault(_entry_day(entry, now), []).append(entry.mood)

    trends: List[MoodTrend] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        moods = by_day.get(day, [])
        if moods:
            trends.append(MoodTrend(
                date=day.isoformat(),
                average_mood=_round1(_mean(moods)),
                entry_count=len(moods),
            ))
        else:
            trends.append(MoodTrend(date=day.isoformat(), average_mood=0, entry_count=0))

    return trends


def analyze_top_tags(entries: Iterable[Entry], limit: int = 5) -> List[TagAnalysis]:
    """
    Count entries per tag and average their moods. Ties on count keep the
    order in which the tags were first seen.
    """
    totals: Dict[str, List[int]] = {}
    for entry in entries:
        # a tag listed twice on one entry still counts that entry once
        for tag in dict.fromkeys(entry.tags):
            bucket = totals.setdefault(tag, [0, 0])
            bucket[0] += 1
            bucket[1] += entry.mood

    analyses = [
        TagAnalysis(tag=tag, count=count, average_mood=_round1(total / count))
        for tag, (count, total) in totals.items()
    ]
    analyses.sort(key=lambda a: -a.count)
    return analyses[:limit]


def calculate_writing_streak(entries: Sequence[Entry], now: Optional[datetime] = None) -> int:
    """
    Consecutive calendar days with at least one entry, ending today or
    yesterday. Several entries on one day count once; future-dated entries
    are ignored.
    """
    if not entries:
        return 0

    now = resolve_now(now)
    today = now.date()
    yesterday = today - timedelta(days=1)
    days = sorted((_entry_day(e, now) for e in entries), reverse=True)

    streak = 0
    cursor = today
    for day in days:
        if day > cursor:
            continue
        if day < cursor:
            if streak == 0 and day == yesterday:
                cursor = yesterday
            else:
                break
        streak += 1
        cursor -= timedelta(days=1)

    logger.debug("Writing streak over %d entries: %d", len(entries), streak)
    return streak


# -------- Insights ---------

def _mood_trend_insight(entries: Sequence[Entry], now: datetime) -> Optional[JournalInsight]:
    trends = calculate_mood_trends(entries, 7, now)
    active_days = [t for t in trends if t.entry_count > 0]
    if len(active_days) < 2:
        return None

    # Sliced from the full week, placeholder days included.
    recent_avg = sum(t.average_mood for t in trends[-3:]) / 3
    earlier_avg = sum(t.average_mood for t in trends[:3]) / 3
    data = {"recent_avg": recent_avg, "earlier_avg": earlier_avg}

    if recent_avg > earlier_avg + MOOD_SHIFT_THRESHOLD:
        return JournalInsight(
            type=InsightType.MOOD_TREND,
            title="Mood Improving! 📈",
            description=(
                f"Your average mood has increased from {earlier_avg:.1f} to "
                f"{recent_avg:.1f} over the past week."
            ),
            data=data,
        )
    if earlier_avg > recent_avg + MOOD_SHIFT_THRESHOLD:
        return JournalInsight(
            type=InsightType.MOOD_TREND,
            title="Consider Self-Care 💙",
            description=(
                "Your mood has dipped recently. Remember to be kind to yourself "
                "and consider what might help."
            ),
            data=data,
        )
    return None


def _streak_insight(streak: int) -> Optional[JournalInsight]:
    if streak <= 0:
        return None
    if streak == 1:
        description = "Great start! Keep building your journaling habit."
    else:
        description = f"Amazing consistency! You've journaled for {streak} days in a row."
    return JournalInsight(
        type=InsightType.WRITING_STREAK,
        title=f"{streak} Day Writing Streak! 🔥",
        description=description,
        data={"streak": streak},
    )


def _top_tag_insight(entries: Sequence[Entry]) -> Optional[JournalInsight]:
    top_tags = analyze_top_tags(entries, 3)
    if not top_tags:
        return None
    top = top_tags[0]
    return JournalInsight(
        type=InsightType.FREQUENT_TAGS,
        title="Most Common Theme 🏷️",
        description=(
            f'You\'ve written about "{top.tag}" {top.count} times '
            f"with an average mood of {top.average_mood:.1f}."
        ),
        data={"top_tags": [t.model_dump() for t in top_tags]},
    )


def _reflection_prompt(entries: Sequence[Entry]) -> Optional[JournalInsight]:
    if len(entries) <= REFLECTION_MIN_ENTRIES:
        return None

    # Callers pass entries newest first; the order is not checked here.
    recent_avg = _mean([e.mood for e in entries[:REFLECTION_SAMPLE_SIZE]])
    data = {"recent_average_mood": recent_avg}

    if recent_avg >= 4:
        return JournalInsight(
            type=InsightType.REFLECTION_PROMPT,
            title="Reflect on Joy ✨",
            description=(
                "You seem to be in a good place! What has been contributing "
                "to your positive mood lately?"
            ),
            data=data,
        )
    if recent_avg <= 2:
        return JournalInsight(
            type=InsightType.REFLECTION_PROMPT,
            title="Gentle Reflection 🌱",
            description=(
                "What small thing could bring you comfort today? Sometimes the "
                "littlest acts of self-care make a big difference."
            ),
            data=data,
        )
    return None


def generate_insights(entries: Sequence[Entry], now: Optional[datetime] = None) -> List[JournalInsight]:
    """
    Build the insight cards in a fixed order: mood trend, writing streak,
    most common tag, reflection prompt. Each rule adds at most one card.
    """
    now = resolve_now(now)
    candidates = [
        _mood_trend_insight(entries, now),
        _streak_insight(calculate_writing_streak(entries, now)),
        _top_tag_insight(entries),
        _reflection_prompt(entries),
    ]
    insights = [c for c in candidates if c is not None]
    logger.debug("Generated %d insights from %d entries", len(insights), len(entries))
    return insights


# -------- Summaries ---------

def get_weekly_stats(entries: Sequence[Entry], now: Optional[datetime] = None) -> WeeklyStats:
    now = resolve_now(now)
    week_ago = now - timedelta(days=7)
    weekly = [e for e in entries if _in_zone(e.created_at, now) >= week_ago]

    return WeeklyStats(
        total_entries=len(weekly),
        average_mood=_round1(_mean([e.mood for e in weekly])),
        top_tags=analyze_top_tags(weekly, 3),
        # streak spans every entry, not just this week's
        writing_streak=calculate_writing_streak(entries, now),
    )


def get_quick_stats(entries: Sequence[Entry], now: Optional[datetime] = None) -> QuickStats:
    now = resolve_now(now)
    average = _round1(_mean([e.mood for e in entries]))
    return QuickStats(
        total_entries=len(entries),
        current_streak=calculate_writing_streak(entries, now),
        average_mood=average,
        mood_emoji=mood_emoji(average),
    )


# -------- Selection ---------

def search_entries(entries: Iterable[Entry], term: str) -> List[Entry]:
    if not term.strip():
        return []
    needle = term.lower()

    def matches(entry: Entry) -> bool:
        if needle in entry.content.lower():
            return True
        if entry.context and needle in entry.context.lower():
            return True
        return any(needle in tag.lower() for tag in entry.tags)

    return [e for e in entries if matches(e)]


def get_entries_for_review(
    entries: Iterable[Entry],
    days_since_review: int = 7,
    limit: int = 3,
    now: Optional[datetime] = None,
) -> List[Entry]:
    """Entries never reviewed, or not reviewed within the last ``days_since_review`` days."""
    now = resolve_now(now)
    cutoff = now - timedelta(days=days_since_review)
    due = [
        e for e in entries
        if e.last_reviewed_at is None or _in_zone(e.last_reviewed_at, now) < cutoff
    ]
    return due[:limit]
