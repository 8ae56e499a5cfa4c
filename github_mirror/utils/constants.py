"""Shared constants used across the application."""

from pathlib import Path

# GitHub API Constants
# --------------------

DEFAULT_GITHUB_API_URL = "https://api.github.com"
"""Default GitHub API URL. GitHub Enterprise Server URLs end in /api/v3 instead."""

DEFAULT_QUERY_BATCH_SIZE = 100
"""Maximum number of node ids requested by a single batched nodes(ids:) query."""

DEFAULT_QUERY_PAGE_SIZE = 100
"""Page size used for every paginated GraphQL connection (GitHub's maximum)."""

# Persistence Constants
# ---------------------

DEFAULT_SAVE_LOCATION = Path.home() / ".github-mirror"
"""Default directory holding the persisted entity store."""

STORE_FILE_SUFFIX = ".yaml"
"""Suffix of each per-kind persisted record file."""

TEMPORARY_FILE_SUFFIX = ".tmp"
"""Suffix of the temporary files written before being swapped into place."""

BACKUP_FILE_SUFFIX = ".bak"
"""Suffix of the previous record files kept until every kind has been swapped into place."""
