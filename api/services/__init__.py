"""
API Services Layer.

Database operations behind the simulator's endpoints. Services take the
request's ``AsyncSession`` and return wire-ready dicts.
"""

from api.services.jobs import (
    create_job,
    get_job,
    list_jobs,
    reorder_job,
    update_job,
)

from api.services.candidates import (
    add_note,
    create_candidate,
    delete_candidate,
    get_candidate,
    get_timeline,
    list_candidates,
    list_notes,
    update_candidate,
)

from api.services.seed import seed_database

__all__ = [
    # Jobs
    "list_jobs",
    "get_job",
    "create_job",
    "update_job",
    "reorder_job",
    # Candidates
    "list_candidates",
    "get_candidate",
    "create_candidate",
    "update_candidate",
    "delete_candidate",
    "get_timeline",
    "list_notes",
    "add_note",
    # Seed data
    "seed_database",
]
