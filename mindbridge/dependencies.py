"""FastAPI dependency providers for the scheduling services"""

from fastapi import Depends
from sqlalchemy.orm import Session

from .cache import availability_cache
from .database import get_db
from .domain.scheduling.availability_service import AvailabilityResolver, CalendarFactory
from .domain.scheduling.mirror import CalendarMirror
from .domain.scheduling.service import BookingCoordinator
from .models import Doctor
from .services.google_calendar_service import get_doctor_calendar


def get_calendar_factory(db: Session = Depends(get_db)) -> CalendarFactory:
    """Calendar client per doctor, bound to the request's session for token refreshes"""

    def factory(doctor: Doctor):
        return get_doctor_calendar(doctor, db)

    return factory


def get_availability_resolver(
    calendar_factory: CalendarFactory = Depends(get_calendar_factory),
) -> AvailabilityResolver:
    return AvailabilityResolver(calendar_factory, cache=availability_cache)


def get_booking_coordinator(
    db: Session = Depends(get_db),
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
    calendar_factory: CalendarFactory = Depends(get_calendar_factory),
) -> BookingCoordinator:
    return BookingCoordinator(db, resolver, CalendarMirror(calendar_factory))
