"""
Deploy API call: endpoint resolution, the POST itself and result classification.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

import httpx

from .errors import ConfigurationError, DeployError

logger = logging.getLogger(__name__)

DEPLOY_PATH = "/api/v1/apps/deploy"


@dataclass(frozen=True)
class DeployRequest:
    api_url: str
    token: str
    image: str


@dataclass(frozen=True)
class DeploySuccess:
    response_body: str


@dataclass(frozen=True)
class DeployFailure:
    status_message: str
    response_body: Optional[str] = None

    @classmethod
    def from_error(cls, error: Exception) -> "DeployFailure":
        return cls(
            status_message=str(error),
            response_body=getattr(error, "response_body", None),
        )


DeployOutcome = Union[DeploySuccess, DeployFailure]


def resolve_api_url(base_url: Optional[str]) -> str:
    """
    Build the deploy endpoint from the configured base URL.

    Args:
        base_url: Deploy service base URL, e.g. "https://coswarm.example.com/"

    Returns:
        Base URL without trailing slashes, followed by the deploy path
    """
    if not base_url:
        raise ConfigurationError("inputs.base-url must be provided.")
    return f"{base_url.rstrip('/')}{DEPLOY_PATH}"


async def _post_deploy(request: DeployRequest) -> str:
    # No deadline on the deploy call; httpx would otherwise cut it off at 5s
    async with httpx.AsyncClient(timeout=None) as client:
        try:
            response = await client.post(
                request.api_url,
                json={"token": request.token, "image": request.image},
                headers={"Content-Type": "application/json"},
            )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            reason = str(e) or e.__class__.__name__
            raise DeployError(f"Deploy request to {request.api_url} failed: {reason}") from e

    body_text = response.text
    if not response.is_success:
        raise DeployError(
            f"Deploy failed with status {response.status_code}: {response.reason_phrase}",
            response_body=body_text,
        )
    return body_text


async def trigger_deploy(request: DeployRequest) -> DeployOutcome:
    """
    Send the single deploy request and classify the result.

    Non-2xx responses keep their body for diagnostics; transport errors
    produce a failure without one. Never retries.
    """
    try:
        body_text = await _post_deploy(request)
    except DeployError as e:
        logger.debug(f"Deploy request failed: {e}")
        return DeployFailure.from_error(e)
    return DeploySuccess(response_body=body_text)
