"""
Scheduling domain.

Role-based permissions, time validation and double-booking detection for the
staff appointment calendar, composed by AppointmentService:

- roles.py           Roles, statuses, Actor
- errors.py          Error kinds with their HTTP status
- time_validator.py  Start/end well-formedness and minimum duration
- permissions.py     View/create/edit/delete decisions
- conflicts.py       Overlap detection against active appointments
- repository.py      Appointment database queries
- service.py         Create/update/delete/list orchestration
- router.py          /appointments endpoints
"""
