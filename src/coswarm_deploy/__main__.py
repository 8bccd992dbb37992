import asyncio
import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

from .actions import (
    WorkflowCommandFormatter,
    get_input,
    load_context,
    load_credentials,
    set_failed,
    set_output,
)
from .deploy import DeployFailure, DeployRequest, DeploySuccess, resolve_api_url, trigger_deploy
from .errors import ConfigurationError
from .notify import FailureDetails, SuccessDetails, notify_failure, notify_success

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProcessResult:
    exit_success: bool
    output: Optional[str] = None
    failure_message: Optional[str] = None


async def run(env: Optional[Mapping[str, str]] = None) -> ProcessResult:
    """
    Trigger one deploy and report the outcome to GitHub.

    Only a configuration error or a failed deploy fails the run; GitHub
    reporting problems are logged and never change the result.
    """
    credentials = load_credentials(env)
    context = load_context(env)

    image = ""
    base_url = ""
    api_url = ""
    try:
        token = get_input("token", required=True, env=env)
        image = get_input("image", required=True, env=env)
        base_url = get_input("base-url", required=True, env=env)
        api_url = resolve_api_url(base_url)
    except ConfigurationError as e:
        outcome = DeployFailure.from_error(e)
    else:
        logger.info(f"Triggering deploy via {api_url}")
        outcome = await trigger_deploy(DeployRequest(api_url=api_url, token=token, image=image))

    if isinstance(outcome, DeploySuccess):
        try:
            result = await notify_success(
                credentials, context, SuccessDetails(api_url=api_url, image=image)
            )
            if not result.delivered and result.errors:
                logger.warning(f"Success comment not posted ({len(result.errors)} attempt(s) failed)")
        except Exception as e:
            logger.warning(f"Failed to post success comment: {e}", exc_info=True)
        return ProcessResult(exit_success=True, output=outcome.response_body)

    try:
        result = await notify_failure(
            credentials,
            context,
            FailureDetails(
                api_url=api_url or base_url or UNKNOWN,
                image=image or UNKNOWN,
                outcome=outcome,
            ),
        )
        if result.delivered:
            logger.info("Opened failure issue")
    except Exception as e:
        logger.warning(f"Could not create failure issue: {e}", exc_info=True)
    return ProcessResult(exit_success=False, failure_message=outcome.status_message)


def configure_logging(env: Optional[Mapping[str, str]] = None) -> None:
    environ = os.environ if env is None else env
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(WorkflowCommandFormatter("%(message)s"))
    level = logging.DEBUG if environ.get("RUNNER_DEBUG") == "1" else logging.INFO
    logging.basicConfig(level=level, handlers=[handler], force=True)


def main() -> int:
    configure_logging()
    result = asyncio.run(run())
    if result.exit_success:
        set_output("response", result.output or "")
        return 0
    set_failed(result.failure_message or "Deploy failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
