from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fixscout_core.models import Clarification, ExtractedRequest

if TYPE_CHECKING:
    from fixscout_core.providers.base import BaseOracle

logger = logging.getLogger(__name__)


def extract_request(oracle: BaseOracle, text: str) -> ExtractedRequest | Clarification:
    """Read SDK, version, problem and links from the report, or ask for what is missing."""
    answer = oracle.extract_request(text)
    sdk = (answer.sdk or "").strip()
    version = (answer.version or "").strip()

    missing = []
    if not sdk:
        missing.append("SDK")
    if not version:
        missing.append("version")
    if missing:
        logger.info("Report is missing %s", " and ".join(missing))
        return Clarification(f"Could not determine {' and '.join(missing)}. Please clarify.")

    links = tuple(dict.fromkeys(link.strip() for link in answer.links if link.strip()))
    return ExtractedRequest(sdk=sdk, version=version, problem=answer.problem.strip(), links=links)
