from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from ..classes.model import ClassTemplate
from ..classes.repository import ClassRepository
from ..common.datetime_utils import local_date, now_utc, require_aware
from ..common.logging import get_logger
from ..core.constants import DEFAULT_SESSION_WINDOW_DAYS
from ..enrollment.service import EnrollmentSnapshotter
from .model import ProjectionResult, Session, SkippedTemplate, session_bounds

logger = get_logger(__name__)


class SessionProjector:
    """Expand weekly templates into dated sessions over a rolling window."""

    def __init__(self, zone: ZoneInfo, *, window_days: int = DEFAULT_SESSION_WINDOW_DAYS):
        self._zone = zone
        self._window_days = int(window_days)

    @property
    def zone(self) -> ZoneInfo:
        return self._zone

    def window_dates(self, *, now: datetime, window_days: Optional[int] = None) -> list[date]:
        days = self._window_days if window_days is None else int(window_days)
        today = local_date(require_aware(now), self._zone)
        return [today + timedelta(days=i) for i in range(max(days, 0))]

    def project(
        self,
        templates: Sequence[ClassTemplate],
        *,
        now: datetime,
        window_days: Optional[int] = None,
        enrolled_counts: Optional[Mapping[str, int]] = None,
    ) -> ProjectionResult:
        dates = self.window_dates(now=now, window_days=window_days)
        counts = enrolled_counts or {}
        sessions: list[Session] = []
        skipped: list[SkippedTemplate] = []

        for template in templates:
            reason = self._unschedulable_reason(template)
            if reason:
                skipped.append(SkippedTemplate(class_id=template.class_id, reason=reason))
                logger.warning("template_skipped", class_id=template.class_id, reason=reason)
                continue

            for day in dates:
                if day.weekday() != template.weekday_index:
                    continue
                sessions.append(self._session_for(template, day, counts.get(template.class_id, 0)))

        sessions.sort(key=lambda s: (s.starts_at, s.class_name, s.class_id))
        return ProjectionResult(sessions=sessions, skipped=skipped)

    def _session_for(self, template: ClassTemplate, day: date, enrolled: int) -> Session:
        start = template.start
        starts_at, ends_at = session_bounds(day, start, template.end, template.duration_minutes, self._zone)
        return Session(
            session_id=f"{template.class_id}-{day.isoformat()}-{start.strftime('%H:%M')}",
            class_id=template.class_id,
            class_name=template.class_name,
            programme=template.programme,
            age_band=template.age_band,
            session_date=day,
            starts_at=starts_at,
            ends_at=ends_at,
            enrolled_count=int(enrolled),
            location=template.location,
        )

    @staticmethod
    def _unschedulable_reason(template: ClassTemplate) -> Optional[str]:
        if template.weekday_index is None:
            return f"unparsable weekday {template.weekday!r}"
        if template.start is None:
            return f"unparsable start time {template.start_time!r}"
        return None


def project_sessions(
    templates: Sequence[ClassTemplate],
    window_days: int = DEFAULT_SESSION_WINDOW_DAYS,
    *,
    now: datetime,
    zone: ZoneInfo,
) -> ProjectionResult:
    return SessionProjector(zone, window_days=window_days).project(templates, now=now)


class SessionService:
    """Loads the catalog and enrollment counts, then projects sessions."""

    def __init__(
        self,
        classes: ClassRepository,
        enrollment: EnrollmentSnapshotter,
        projector: SessionProjector,
    ):
        self._classes = classes
        self._enrollment = enrollment
        self._projector = projector

    def upcoming(self, *, now: datetime | None = None, window_days: int | None = None) -> ProjectionResult:
        now = now or now_utc()
        templates = list(self._classes.list_all())
        counts = self._enrollment.counts_by_class([t.class_id for t in templates])
        return self._projector.project(templates, now=now, window_days=window_days, enrolled_counts=counts)
