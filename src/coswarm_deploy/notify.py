"""
Reporting deploy outcomes back to GitHub.

Success is posted to the most specific target the triggering event offers:
the release being published, then the pull request, then the commit. The
first target that accepts the message wins; a failing target falls through
to the next one. Failure always opens a new issue.

Both entry points are best-effort: GitHub errors are logged as warnings and
collected in the returned NotificationResult, never raised.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .actions import Credentials, RunContext
from .deploy import DeployFailure
from .errors import NotificationError
from .github import GitHubClient

logger = logging.getLogger(__name__)

RELEASE = "release"
PULL_REQUEST = "pull_request"
COMMIT = "commit"
ISSUE = "issue"


@dataclass(frozen=True)
class SuccessDetails:
    api_url: str
    image: str


@dataclass(frozen=True)
class FailureDetails:
    api_url: str
    image: str
    outcome: DeployFailure


@dataclass(frozen=True)
class NotificationResult:
    channel: Optional[str] = None
    errors: Tuple[str, ...] = ()

    @property
    def delivered(self) -> bool:
        return self.channel is not None


def success_message(details: SuccessDetails) -> str:
    return "\n".join([
        f"✅ Coswarm deploy succeeded for {details.image}",
        "",
        f"**API URL:** {details.api_url}",
        f"**Image:** {details.image}",
    ])


def failure_issue(details: FailureDetails) -> Tuple[str, str]:
    """Build the (title, body) of the issue opened for a failed deploy."""
    response_body = details.outcome.response_body
    response_section = ""
    if response_body:
        response_section = "\n".join([
            "<details>",
            "<summary>Response body</summary>",
            "",
            "```",
            response_body,
            "```",
            "</details>",
        ])

    title = f"Coswarm deploy failed for {details.image}"
    lines = [
        "The Coswarm deployment API call failed.",
        "",
        f"**API URL:** {details.api_url}",
        f"**Image:** {details.image}",
        f"**Status:** {details.outcome.status_message}",
        response_section,
        "",
        "Please investigate the deployment service.",
    ]
    return title, "\n".join(line for line in lines if line)


async def _update_release(gh: GitHubClient, context: RunContext, tag: str, body: str) -> None:
    owner, repo = context.repo
    release = await gh.get_release_by_tag(owner, repo, tag)
    if "id" not in release:
        raise NotificationError(f"Release {tag} has no id in the API response")
    new_body = f"{release.get('body') or ''}\n\n{body}"
    await gh.update_release(owner, repo, release["id"], new_body)


async def notify_success(
    credentials: Credentials,
    context: RunContext,
    details: SuccessDetails
) -> NotificationResult:
    """Post the success message on the release, PR or commit that triggered the run."""
    if not credentials.github_token:
        logger.info("No GitHub token available to post success comment.")
        return NotificationResult()

    body = success_message(details)
    errors = []

    async with GitHubClient(token=credentials.github_token, base_url=credentials.api_url) as gh:
        if context.release_tag:
            try:
                await _update_release(gh, context, context.release_tag, body)
                return NotificationResult(channel=RELEASE)
            except NotificationError as e:
                logger.warning(f"Could not update release: {e}")
                errors.append(str(e))

        if context.pull_request_number:
            try:
                owner, repo = context.repo
                await gh.create_issue_comment(owner, repo, context.pull_request_number, body)
                return NotificationResult(channel=PULL_REQUEST, errors=tuple(errors))
            except NotificationError as e:
                logger.warning(f"Could not create PR comment: {e}")
                errors.append(str(e))

        if context.triggering_sha:
            try:
                owner, repo = context.repo
                await gh.create_commit_comment(owner, repo, context.triggering_sha, body)
                return NotificationResult(channel=COMMIT, errors=tuple(errors))
            except NotificationError as e:
                logger.warning(f"Could not create commit comment: {e}")
                errors.append(str(e))

    logger.info("No suitable target found to post success comment; skipping.")
    return NotificationResult(errors=tuple(errors))


async def notify_failure(
    credentials: Credentials,
    context: RunContext,
    details: FailureDetails
) -> NotificationResult:
    """Open an issue describing the failed deploy."""
    if not credentials.github_token:
        logger.warning("No GitHub token available to create a failure issue.")
        return NotificationResult()

    title, body = failure_issue(details)
    async with GitHubClient(token=credentials.github_token, base_url=credentials.api_url) as gh:
        try:
            owner, repo = context.repo
            await gh.create_issue(owner, repo, title, body)
        except NotificationError as e:
            logger.warning(f"Could not create failure issue: {e}")
            return NotificationResult(errors=(str(e),))
    return NotificationResult(channel=ISSUE)
