"""Tests for the standard_command decorator."""

import json

import click
import pytest
from click.testing import CliRunner

from calrelease.cli_utils import standard_command
from calrelease.exit_codes import (
    DATA_ERROR, GENERAL_ERROR, NETWORK_ERROR, RemoteMissingError, get_exit_code_for_exception,
)
from calrelease.infra.git_client import GitError


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv('HOME', str(tmp_path))
    monkeypatch.delenv('CALRELEASE_CONFIG', raising=False)
    return CliRunner()


def make_command(body, streaming=False):
    @click.command()
    @click.option('--verbose', '-v', is_flag=True)
    @standard_command(streaming=streaming)
    def cmd(verbose, config):
        return body(config)
    return cmd


class TestOutput:

    def test_none_prints_nothing(self, runner):
        result = runner.invoke(make_command(lambda config: None))
        assert result.exit_code == 0
        assert result.output == ""

    def test_dict_printed_as_json(self, runner):
        result = runner.invoke(make_command(lambda config: {"name": "2020.05.001-release"}))
        assert result.exit_code == 0
        assert json.loads(result.output) == {"name": "2020.05.001-release"}

    def test_generator_printed_as_jsonl(self, runner):
        cmd = make_command(lambda config: ({"n": i} for i in range(3)), streaming=True)
        result = runner.invoke(cmd)
        assert result.exit_code == 0
        assert [json.loads(l) for l in result.output.splitlines()] == [{"n": 0}, {"n": 1}, {"n": 2}]

    def test_config_is_injected(self, runner):
        result = runner.invoke(make_command(lambda config: {"has_release": 'release' in config}))
        assert json.loads(result.output) == {"has_release": True}

    def test_failing_generator_without_streaming_prints_nothing(self, runner):
        def rows(config):
            yield {"n": 1}
            raise GitError("failed to read objects")

        result = runner.invoke(make_command(rows))

        assert result.exit_code == GENERAL_ERROR
        assert '{"n": 1}' not in result.output

    def test_failing_generator_with_streaming_keeps_earlier_lines(self, runner):
        def rows(config):
            yield {"n": 1}
            raise GitError("failed to read objects")

        result = runner.invoke(make_command(rows, streaming=True))

        assert result.exit_code == GENERAL_ERROR
        assert '{"n": 1}' in result.output


class TestErrors:

    def raising(self, exc):
        def body(config):
            raise exc
        return make_command(body)

    def test_command_error_uses_its_exit_code(self, runner):
        result = runner.invoke(self.raising(RemoteMissingError("remote upstream not found")))
        assert result.exit_code == RemoteMissingError("x").exit_code
        assert "Error: remote upstream not found" in result.output

    def test_git_error_is_general_error(self, runner):
        result = runner.invoke(self.raising(GitError("failed to list tags")))
        assert result.exit_code == GENERAL_ERROR
        assert "Error: failed to list tags" in result.output

    @pytest.mark.parametrize("exc, code", [
        (ValueError("bad value"), DATA_ERROR),
        (ConnectionError("down"), NETWORK_ERROR),
        (RuntimeError("boom"), GENERAL_ERROR),
    ])
    def test_other_exceptions_mapped(self, runner, exc, code):
        result = runner.invoke(self.raising(exc))
        assert result.exit_code == code
        assert get_exit_code_for_exception(exc) == code

    def test_click_exception_passes_through(self, runner):
        result = runner.invoke(self.raising(click.UsageError("wrong usage")))
        assert result.exit_code == 2
        assert "wrong usage" in result.output

    def test_keyboard_interrupt(self, runner):
        result = runner.invoke(self.raising(KeyboardInterrupt()))
        assert result.exit_code == 130
        assert "Interrupted by user" in result.output
