"""Background tasks for the worker."""

from runner.tasks.convert_lessons import convert_lessons, run_conversion_job
from runner.tasks.rollback_conversion import rollback_conversion, run_rollback_job

__all__ = [
    "convert_lessons",
    "rollback_conversion",
    "run_conversion_job",
    "run_rollback_job",
]
