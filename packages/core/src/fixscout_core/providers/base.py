"""Base oracle implementing the Template Method pattern.

Every structured question follows the same algorithm:
    extract_request() / score_confidence() / ...
        → _ask(system, body, schema)
        → _build_user_prompt() → _call_with_retry() → _call_api()   ← only this differs per provider
        → _parse()

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

Prompt construction, schema validation and retry logic live here so every
provider answers the same questions in the same shape.
"""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from fixscout_core.providers import prompts
from fixscout_core.providers.schemas import (
    ConfidenceAnswer,
    ExtractionAnswer,
    RelevantEntries,
    RelevantEntry,
    RepositoryAnswer,
    VerificationAnswer,
)

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_MAX_TOKENS = 4096

# Long PR descriptions (templates, screenshots, checklists) add cost without signal.
_PR_BODY_CHAR_LIMIT = 4_000

T = TypeVar("T", bound=BaseModel)


class OracleError(RuntimeError):
    """The oracle could not produce a valid answer."""


def missing_sdk(provider: str) -> ImportError:
    """The error raised when an oracle's optional client library is not installed."""
    return ImportError(
        f"--model {provider} needs the {provider} client library; install it with: pip install 'fixscout[{provider}]'"
    )


class BaseOracle(ABC):
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS

    # ------------------------------------------------------------------ #
    # Public interface: one method per structured question                #
    # ------------------------------------------------------------------ #

    def extract_request(self, text: str) -> ExtractionAnswer:
        """Pull SDK, version, problem summary and links out of a free-text report."""
        return self._ask(prompts.EXTRACT_REQUEST, f"## Report\n{text}", ExtractionAnswer)

    def resolve_repository(self, text: str) -> str | None:
        """Infer the ``owner/name`` repository a report is about, or None if unsure."""
        answer = self._ask(
            prompts.RESOLVE_REPOSITORY,
            f"Determine which GitHub repository this report belongs to:\n\n{text}",
            RepositoryAnswer,
        )
        if answer.confidence == "low":
            logger.info("Oracle could not pick a repository with confidence: %s", answer.reasoning)
            return None
        owner = answer.owner.strip().strip("/")
        name = answer.repo.strip().strip("/")
        if "/" in name:
            return name
        if not owner or not name:
            return None
        return f"{owner}/{name}"

    def filter_relevant_entries(self, release_notes: str, problem: str, text: str) -> list[RelevantEntry]:
        body = f"""## Problem
{problem}

## Full report
{text}

## Release notes
{release_notes}"""
        return self._ask(prompts.FILTER_RELEVANT_ENTRIES, body, RelevantEntries).entries

    def score_confidence(self, pr_title: str, pr_body: str, problem: str, text: str) -> ConfidenceAnswer:
        return self._ask(prompts.SCORE_CONFIDENCE, self._pr_question(pr_title, pr_body, problem, text), ConfidenceAnswer)

    def verify_match(self, pr_title: str, pr_body: str, problem: str, text: str) -> VerificationAnswer:
        """Independent second opinion; deliberately not told what score the PR received."""
        return self._ask(prompts.VERIFY_MATCH, self._pr_question(pr_title, pr_body, problem, text), VerificationAnswer)

    # ------------------------------------------------------------------ #
    # Abstract — implement in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        This is the only method subclasses must implement. It should raise
        on failure — _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _ask(self, system_prompt: str, body: str, schema: type[T]) -> T:
        user = self._build_user_prompt(body, schema)
        raw = self._call_with_retry(system_prompt, user)
        return self._parse(raw, schema)

    def _call_with_retry(self, system_prompt: str, user_prompt: str) -> str:
        """Retry _call_api up to MAX_RETRIES times with exponential backoff.

        Raises OracleError once the attempts are exhausted.
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(system_prompt, user_prompt)
            except Exception as e:
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    raise OracleError(f"{self.__class__.__name__} API failed: {e}") from e
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)
        raise OracleError(f"{self.__class__.__name__}: no attempts were made")

    @staticmethod
    def _pr_question(pr_title: str, pr_body: str, problem: str, text: str) -> str:
        pr_body = pr_body or ""
        if len(pr_body) > _PR_BODY_CHAR_LIMIT:
            pr_body = pr_body[:_PR_BODY_CHAR_LIMIT] + "\n... [description truncated]"
        return f"""## Reported problem
{problem}

## Full report
{text}

## Pull request
Title: {pr_title}

{pr_body}"""

    @staticmethod
    def _build_user_prompt(body: str, schema: type[BaseModel]) -> str:
        """Append the answer format to the question body.

        The format lives in the user prompt because it changes per question,
        while the system prompt describes the role.
        """
        return f"""{body}

### Output Format:
Respond with **only** a JSON object matching this JSON Schema:

{json.dumps(schema.model_json_schema(), indent=2)}

Do not return any text outside the JSON object."""

    def _parse(self, raw: str, schema: type[T]) -> T:
        """Validate the model's raw text response against ``schema``."""
        # Strip only an outer ```json ... ``` fence, not backticks inside values.
        cleaned = re.sub(r"^```(?:json)?\s*", "", (raw or "").strip())
        cleaned = re.sub(r"\s*```$", "", cleaned.strip())
        try:
            return schema.model_validate_json(cleaned)
        except ValidationError as e:
            logger.warning(
                "%s: response did not match %s: %s",
                self.__class__.__name__,
                schema.__name__,
                (raw or "")[:200],
            )
            raise OracleError(f"{self.__class__.__name__}: invalid {schema.__name__} answer") from e
