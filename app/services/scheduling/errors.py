"""
Errors raised for malformed scheduling or costing input.
Expected data conditions (shortages, under-hours) are returned as warnings instead.
"""


class SchedulingInputError(ValueError):
    """Input that the engine refuses to work with (bad week start, bad template, bad rule...)."""


class MissingPayFieldError(ValueError):
    """Worker record lacks the pay fields required by its pay type."""

    def __init__(self, worker_id: str, field_name: str):
        self.worker_id = worker_id
        self.field_name = field_name
        super().__init__(f"Worker {worker_id} is missing required pay field '{field_name}'")
