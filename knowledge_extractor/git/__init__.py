"""Git helpers for materialising repositories."""

from __future__ import annotations

from .clone import (
    AcquiredRepo,
    AcquisitionError,
    DEFAULT_CLONE_DIR,
    RepoAcquirer,
    is_local_repo,
    parse_repo_identifier,
    repo_identity_for_path,
)

__all__ = [
    "AcquiredRepo",
    "AcquisitionError",
    "DEFAULT_CLONE_DIR",
    "RepoAcquirer",
    "is_local_repo",
    "parse_repo_identifier",
    "repo_identity_for_path",
]
