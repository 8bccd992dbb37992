"""Unit tests for the Actions runtime helpers."""

import logging

import pytest

from coswarm_deploy.actions import (
    Credentials,
    RunContext,
    WorkflowCommandFormatter,
    escape_data,
    get_input,
    load_context,
    load_credentials,
    set_failed,
    set_output,
)
from coswarm_deploy.errors import ConfigurationError, NotificationError


class TestGetInput:
    """Tests for get_input."""

    def test_reads_hyphenated_name(self):
        assert get_input("base-url", env={"INPUT_BASE-URL": " https://x/ "}) == "https://x/"

    def test_spaces_become_underscores(self):
        assert get_input("my input", env={"INPUT_MY_INPUT": "v"}) == "v"

    def test_optional_missing(self):
        assert get_input("github-token", env={}) == ""

    @pytest.mark.parametrize("env", [{}, {"INPUT_TOKEN": "   "}])
    def test_required_missing(self, env):
        with pytest.raises(ConfigurationError, match="Input required and not supplied: token"):
            get_input("token", required=True, env=env)


class TestWorkflowCommands:
    """Tests for outputs and failure commands."""

    def test_escape_data(self):
        assert escape_data("50%\r\nnext") == "50%25%0D%0Anext"

    def test_set_output_file(self, tmp_path):
        output = tmp_path / "output"
        set_output("response", "line1\nline2", env={"GITHUB_OUTPUT": str(output)})

        lines = output.read_text().splitlines()
        assert lines[0].startswith("response<<ghadelimiter_")
        delimiter = lines[0].split("<<", 1)[1]
        assert lines[1:] == ["line1", "line2", delimiter]

    def test_set_output_appends(self, tmp_path):
        output = tmp_path / "output"
        output.write_text("other<<EOF\nx\nEOF\n")

        set_output("response", "ok", env={"GITHUB_OUTPUT": str(output)})

        assert output.read_text().startswith("other<<EOF\nx\nEOF\nresponse<<")

    def test_set_output_legacy_command(self, capsys: pytest.CaptureFixture):
        set_output("response", "ok", env={})
        assert capsys.readouterr().out == "::set-output name=response::ok\n"

    def test_set_failed(self, capsys: pytest.CaptureFixture):
        set_failed("Deploy failed with status 503: Service Unavailable\nretry later")
        assert capsys.readouterr().out == (
            "::error::Deploy failed with status 503: Service Unavailable%0Aretry later\n"
        )


class TestLoadContext:
    """Tests for load_context."""

    def test_push_event(self, event_file):
        env = {
            "GITHUB_REPOSITORY": "octo/app",
            "GITHUB_SHA": "abc123",
            "GITHUB_EVENT_PATH": event_file({"ref": "refs/heads/main"}),
        }

        assert load_context(env) == RunContext(
            repository_owner="octo", repository_name="app", triggering_sha="abc123"
        )

    def test_release_event(self, event_file):
        env = {
            "GITHUB_REPOSITORY": "octo/app",
            "GITHUB_EVENT_PATH": event_file({"release": {"tag_name": "v1.0"}}),
        }

        context = load_context(env)

        assert context.release_tag == "v1.0"
        assert context.pull_request_number is None

    def test_pull_request_event(self, event_file):
        env = {
            "GITHUB_REPOSITORY": "octo/app",
            "GITHUB_EVENT_PATH": event_file({"pull_request": {"number": 12}}),
        }

        assert load_context(env).pull_request_number == 12

    def test_invalid_repository(self, caplog: pytest.LogCaptureFixture):
        context = load_context({"GITHUB_REPOSITORY": "not-a-repo"})

        assert context.repository_owner is None
        assert "Invalid repository format: not-a-repo" in caplog.text
        with pytest.raises(NotificationError, match="GITHUB_REPOSITORY"):
            context.repo

    def test_non_object_event_payload(self, event_file, caplog: pytest.LogCaptureFixture):
        env = {"GITHUB_REPOSITORY": "octo/app", "GITHUB_EVENT_PATH": event_file(["release"])}

        context = load_context(env)

        assert context == RunContext(repository_owner="octo", repository_name="app")
        assert "expected a JSON object" in caplog.text

    def test_unreadable_event_file(self, tmp_path, caplog: pytest.LogCaptureFixture):
        path = tmp_path / "event.json"
        path.write_text("{not json")

        context = load_context({"GITHUB_REPOSITORY": "octo/app", "GITHUB_EVENT_PATH": str(path)})

        assert context.release_tag is None
        assert "Could not read event payload" in caplog.text


class TestLoadCredentials:
    """Tests for load_credentials."""

    def test_input_wins(self):
        env = {"INPUT_GITHUB-TOKEN": "from-input", "GITHUB_TOKEN": "from-env"}
        assert load_credentials(env).github_token == "from-input"

    def test_env_fallback(self):
        assert load_credentials({"GITHUB_TOKEN": "from-env"}).github_token == "from-env"

    def test_absent(self):
        assert load_credentials({}) == Credentials()

    def test_enterprise_api_url(self):
        env = {"GITHUB_API_URL": "https://ghe.example.com/api/v3"}
        assert load_credentials(env).api_url == "https://ghe.example.com/api/v3"


class TestWorkflowCommandFormatter:
    """Tests for WorkflowCommandFormatter."""

    @pytest.mark.parametrize(
        "level,expected",
        [
            (logging.DEBUG, "::debug::hello"),
            (logging.INFO, "hello"),
            (logging.WARNING, "::warning::hello"),
            (logging.ERROR, "::error::hello"),
        ],
    )
    def test_levels(self, level: int, expected: str):
        record = logging.LogRecord("coswarm_deploy", level, __file__, 1, "hello", None, None)
        assert WorkflowCommandFormatter("%(message)s").format(record) == expected
