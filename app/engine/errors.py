"""Engine exceptions.

Missing profile data and empty candidate lists are normal outcomes and
never raise; only lookups of named rows and storage failures do.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for engine failures."""


class TemplateNotFound(EngineError):
    def __init__(self, template_id: str) -> None:
        super().__init__(f"Unknown template: {template_id}")
        self.template_id = template_id


class ProgramNotFound(EngineError):
    def __init__(self, person_id: str, detail: str | None = None) -> None:
        super().__init__(detail or f"No program for person: {person_id}")
        self.person_id = person_id


class DayNotFound(EngineError):
    def __init__(self, person_id: str, day_id: str) -> None:
        super().__init__(f"Day {day_id} is not part of the program for person {person_id}")
        self.person_id = person_id
        self.day_id = day_id


class PersistenceFailure(EngineError):
    """A multi-step write failed and was rolled back."""
