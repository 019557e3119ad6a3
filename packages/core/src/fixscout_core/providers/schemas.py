"""Structured answer schemas for the oracle questions.

The JSON Schema of each model is embedded in the prompt and the model's
reply is validated against it, so a malformed answer fails loudly instead
of leaking half-parsed dicts into the pipeline.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class ExtractionAnswer(BaseModel):
    sdk: Optional[str] = Field(
        default=None,
        description="SDK name or platform the report is about (e.g. 'sentry-cocoa', 'android'); null if not stated",
    )
    version: Optional[str] = Field(
        default=None,
        description="SDK version the user observed the problem on, exactly as written; null if not stated",
    )
    problem: str = Field(default="", description="One or two sentence summary of the observed problem")
    links: list[str] = Field(
        default_factory=list,
        description="GitHub issue or pull request URLs referenced in the report",
    )


class RepositoryAnswer(BaseModel):
    owner: str = Field(description="GitHub repository owner or organization")
    repo: str = Field(description="GitHub repository name")
    confidence: Literal["high", "medium", "low"] = Field(description="Confidence of the repository match")
    reasoning: str = Field(default="", description="Why this repository was chosen")


class RelevantEntry(BaseModel):
    release: str = Field(description="Tag of the release whose notes contain the line")
    line: str = Field(description="The release-note line, verbatim")
    pr_reference: Optional[str] = Field(
        default=None,
        description="Pull request reference from the line such as '#1234', or null",
    )


class RelevantEntries(BaseModel):
    entries: list[RelevantEntry] = Field(default_factory=list)


class ConfidenceAnswer(BaseModel):
    level: Literal["high", "medium", "low"] = Field(description="How likely the PR fixes the problem")
    reason: str = Field(description="One sentence justification")


class VerificationAnswer(BaseModel):
    confirmed: bool = Field(description="True only if the PR clearly addresses this exact problem")
    reason: str = Field(description="One sentence justification")
