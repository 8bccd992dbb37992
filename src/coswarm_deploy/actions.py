"""
GitHub Actions runtime: inputs, outputs, workflow commands and event context.
"""
import json
import logging
import os
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError, NotificationError
from .github import DEFAULT_API_URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunContext:
    """Event metadata for the workflow run that triggered the deploy."""

    repository_owner: Optional[str] = None
    repository_name: Optional[str] = None
    triggering_sha: Optional[str] = None
    release_tag: Optional[str] = None
    pull_request_number: Optional[int] = None

    @property
    def repo(self) -> Tuple[str, str]:
        if not self.repository_owner or not self.repository_name:
            raise NotificationError(
                "context.repo requires a GITHUB_REPOSITORY environment variable like 'owner/repo'"
            )
        return self.repository_owner, self.repository_name


@dataclass(frozen=True)
class Credentials:
    github_token: Optional[str] = None
    api_url: str = DEFAULT_API_URL


def _environ(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if env is None else env


def get_input(name: str, required: bool = False, env: Optional[Mapping[str, str]] = None) -> str:
    """
    Read an action input the way the runner exposes it (INPUT_<NAME>).

    Args:
        name: Input name as declared in action.yml (e.g., "base-url")
        required: Raise ConfigurationError when the value is empty
        env: Environment mapping, defaults to os.environ

    Returns:
        Stripped input value, or "" when unset
    """
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    value = _environ(env).get(key, "").strip()
    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def issue_command(command: str, message: str, properties: Optional[Dict[str, str]] = None) -> None:
    props = ""
    if properties:
        props = " " + ",".join(f"{k}={escape_property(v)}" for k, v in properties.items())
    print(f"::{command}{props}::{escape_data(message)}", flush=True)


def set_output(name: str, value: str, env: Optional[Mapping[str, str]] = None) -> None:
    """Publish a step output through the $GITHUB_OUTPUT file."""
    output_path = _environ(env).get("GITHUB_OUTPUT")
    if not output_path:
        issue_command("set-output", value, {"name": name})
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    # The delimiter must not collide with the payload
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected delimiter collision while writing output {name}")
    with open(output_path, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def set_failed(message: str) -> None:
    """Mark the step as failed; the caller is responsible for the exit code."""
    issue_command("error", message)


def _load_event_payload(event_path: Optional[str]) -> Dict[str, Any]:
    if not event_path:
        return {}
    try:
        with open(event_path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read event payload at {event_path}: {e}")
        return {}
    if not isinstance(payload, dict):
        logger.warning(f"Ignoring event payload at {event_path}: expected a JSON object")
        return {}
    return payload


def load_context(env: Optional[Mapping[str, str]] = None) -> RunContext:
    """Build the RunContext from the runner's GITHUB_* variables and event file."""
    environ = _environ(env)

    owner = repo = None
    repository = environ.get("GITHUB_REPOSITORY", "")
    if repository:
        repo_parts = repository.split("/")
        if len(repo_parts) == 2 and all(repo_parts):
            owner, repo = repo_parts
        else:
            logger.warning(f"Invalid repository format: {repository}")

    payload = _load_event_payload(environ.get("GITHUB_EVENT_PATH"))
    release = payload.get("release") or {}
    pull_request = payload.get("pull_request") or {}

    return RunContext(
        repository_owner=owner,
        repository_name=repo,
        triggering_sha=environ.get("GITHUB_SHA") or None,
        release_tag=release.get("tag_name") or None,
        pull_request_number=pull_request.get("number") or None,
    )


def load_credentials(env: Optional[Mapping[str, str]] = None) -> Credentials:
    """Resolve the GitHub token: github-token input first, then GITHUB_TOKEN."""
    environ = _environ(env)
    token = get_input("github-token", env=environ) or environ.get("GITHUB_TOKEN") or None
    return Credentials(
        github_token=token,
        api_url=environ.get("GITHUB_API_URL") or DEFAULT_API_URL,
    )


class WorkflowCommandFormatter(logging.Formatter):
    """Render log records as workflow commands so warnings become annotations."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"::error::{escape_data(message)}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{escape_data(message)}"
        if record.levelno < logging.INFO:
            return f"::debug::{escape_data(message)}"
        return message
