"""
Scheduling Domain

Availability resolution against provider calendars and appointment booking.

- availability_service.py: working-hours slots minus calendar busy time, TTL cached
- service.py: booking coordinator (create, reschedule, cancel, sync)
- mirror.py: best-effort replication of appointments to the provider calendar
- repository.py: appointment queries
- router.py: /appointments endpoints
"""
