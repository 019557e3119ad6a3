from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from fixscout_core.gh.links import is_repo_slug
from fixscout_core.lookups import SDK_REPOSITORIES, lookup_sdk_repository
from fixscout_core.models import Clarification
from fixscout_core.providers.base import OracleError

if TYPE_CHECKING:
    from fixscout_core.providers.base import BaseOracle

logger = logging.getLogger(__name__)


def resolve_repository(
    oracle: BaseOracle,
    sdk: str,
    context: str,
    table: Mapping[str, str] = SDK_REPOSITORIES,
) -> str | Clarification:
    """Map an SDK name to ``owner/name``: static table first, then the oracle."""
    repo = lookup_sdk_repository(sdk, table)
    if repo:
        logger.info("Resolved %r to %s from the SDK table", sdk, repo)
        return repo

    if context:
        try:
            repo = oracle.resolve_repository(context)
        except OracleError as e:
            logger.warning("Oracle could not resolve a repository for %r: %s", sdk, e)
            repo = None

    if not is_repo_slug(repo):
        return Clarification(f'Could not map SDK "{sdk}" to a repository. Please specify the GitHub repo.')

    repo = repo.strip()
    logger.info("Resolved %r to %s from the report context", sdk, repo)
    return repo
