"""Tests for the JSON-RPC envelopes and tool payload models."""

import pytest
from pydantic import ValidationError

from shellbridge.modules.api import (
    CallToolParams,
    CallToolResult,
    JSONRPCErrorResponse,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    ShellArguments,
    parse_message,
)


@pytest.mark.parametrize(
    "payload,expected_type",
    [
        ({"jsonrpc": "2.0", "id": 1, "method": "tools/list"}, JSONRPCRequest),
        ({"jsonrpc": "2.0", "id": "req-1", "method": "ping", "params": {}}, JSONRPCRequest),
        ({"jsonrpc": "2.0", "method": "notifications/initialized"}, JSONRPCNotification),
        ({"jsonrpc": "2.0", "id": None, "method": "notifications/cancelled"}, JSONRPCNotification),
        ({"jsonrpc": "2.0", "id": 3, "result": {}}, JSONRPCResponse),
        ({"jsonrpc": "2.0", "id": 3, "error": {"code": -1, "message": "no"}}, JSONRPCErrorResponse),
    ],
)
def test_parse_message_classifies(payload, expected_type):
    assert isinstance(parse_message(payload), expected_type)


@pytest.mark.parametrize(
    "payload",
    [
        "ping",
        [{"jsonrpc": "2.0", "id": 1, "method": "ping"}],
        {"id": 1, "method": "ping"},
        {"jsonrpc": "1.0", "id": 1, "method": "ping"},
        {"jsonrpc": "2.0", "id": 1},
        {"jsonrpc": "2.0", "id": 1, "method": "ping", "params": "not-an-object"},
        {"jsonrpc": "2.0", "id": 1, "error": {"message": "missing code"}},
    ],
)
def test_parse_message_rejects(payload):
    with pytest.raises(ValueError):
        parse_message(payload)


def test_call_tool_params_null_arguments():
    params = CallToolParams.model_validate({"name": "shell", "arguments": None})

    assert params.arguments == {}


@pytest.mark.parametrize("params", [{}, {"name": None}, {"name": 7}, {"arguments": {"command": "ls"}}])
def test_call_tool_params_requires_string_name(params):
    with pytest.raises(ValidationError):
        CallToolParams.model_validate(params)


def test_call_tool_params_accepts_empty_name():
    assert CallToolParams.model_validate({"name": ""}).name == ""


def test_shell_arguments():
    args = ShellArguments.model_validate({"command": "gh pr list", "cwd": "/workspace/repo"})

    assert args.command == "gh pr list"
    assert args.cwd == "/workspace/repo"
    assert ShellArguments(command="ls").cwd is None


@pytest.mark.parametrize("arguments", [{}, {"command": "   "}, {"command": 42}])
def test_shell_arguments_invalid(arguments):
    with pytest.raises(ValidationError):
        ShellArguments.model_validate(arguments)


def test_call_tool_result_payload():
    assert CallToolResult.text("done").to_payload() == {
        "content": [{"type": "text", "text": "done"}]
    }
    assert CallToolResult.text("Unknown tool: x", is_error=True).to_payload() == {
        "content": [{"type": "text", "text": "Unknown tool: x"}],
        "isError": True,
    }
