"""Settings and job files."""

from .jobs import JOB_SCHEMA, Job, build_config, load_job, load_records, run_job, validate_job
from .settings import Settings, get_settings, load_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "load_settings",
    # Jobs
    "JOB_SCHEMA",
    "Job",
    "build_config",
    "load_job",
    "load_records",
    "run_job",
    "validate_job",
]
