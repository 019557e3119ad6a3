"""GitHub access for the analysis pipeline, on top of PyGithub.

Only three questions are asked of GitHub: which releases does a repo have,
what does a pull request say, and which PR + release closed a linked issue.
"""

from __future__ import annotations

import logging

from github import Auth, Github, GithubException

from fixscout_core.gh.links import mentions_pr, parse_github_link
from fixscout_core.models import IssueResolution, PullRequestDetails, Release
from fixscout_core.versions import is_stable, sort_key

logger = logging.getLogger(__name__)


def _to_release(gh_release) -> Release:
    return Release(
        tag=gh_release.tag_name,
        name=gh_release.title,
        url=gh_release.html_url or "",
        body=gh_release.body,
    )


class GitHubClient:
    def __init__(self, token: str | None = None, gh: Github | None = None):
        if gh is not None:
            self._gh = gh
        elif token:
            self._gh = Github(auth=Auth.Token(token))
        else:
            self._gh = Github()

    def list_releases(self, repo: str) -> list[Release]:
        """Return every release of ``repo`` in whatever order GitHub lists them."""
        releases = [_to_release(r) for r in self._gh.get_repo(repo).get_releases()]
        logger.debug("Fetched %d releases for %s", len(releases), repo)
        return releases

    def get_pull_request(self, repo: str, number: int) -> PullRequestDetails | None:
        try:
            pr = self._gh.get_repo(repo).get_pull(number)
        except GithubException as e:
            if e.status == 404:
                logger.info("PR #%d not found in %s", number, repo)
                return None
            raise
        return PullRequestDetails(
            number=pr.number,
            title=pr.title or "",
            body=pr.body or "",
            merged=bool(pr.merged),
        )

    def resolve_issue_link(self, url: str) -> IssueResolution | None:
        """Map an issue/PR link to the merged PR that fixed it and the first release shipping it.

        Returns None when the link is not a GitHub issue/PR URL, nothing merged
        closed it, or no stable release mentions the PR.
        """
        parsed = parse_github_link(url)
        if parsed is None:
            logger.debug("Not a GitHub issue or PR link: %s", url)
            return None
        repo_slug, kind, number = parsed
        repo = self._gh.get_repo(repo_slug)

        pr_number = self._closing_pr_number(repo, kind, number)
        if pr_number is None:
            return None

        release = self._first_release_mentioning(repo_slug, pr_number)
        if release is None:
            logger.info("No release of %s mentions PR #%d", repo_slug, pr_number)
            return None
        return IssueResolution(fixed_in_version=release.tag, pr_number=pr_number, repo=repo_slug)

    def _closing_pr_number(self, repo, kind: str, number: int) -> int | None:
        if kind == "pull":
            return number if repo.get_pull(number).merged else None

        issue = repo.get_issue(number)
        if issue.pull_request is not None:
            # GitHub serves PRs under /issues/ too.
            return number if repo.get_pull(number).merged else None

        for event in issue.get_events():
            if event.event != "closed" or not event.commit_id:
                continue
            for pull in repo.get_commit(event.commit_id).get_pulls():
                if pull.merged:
                    return pull.number
        return None

    def _first_release_mentioning(self, repo_slug: str, pr_number: int) -> Release | None:
        stable = sorted(
            (r for r in self.list_releases(repo_slug) if is_stable(r.tag)),
            key=lambda r: sort_key(r.tag),
        )
        return next((r for r in stable if mentions_pr(r.body, repo_slug, pr_number)), None)
