"""
Capability Module for Shellbridge.

Describes the one operation the gateway offers to tool protocol clients:
running a shell command in the sandbox with the GitHub CLI already
authenticated.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

logger = logging.getLogger("shellbridge.capability")

SHELL_CAPABILITY = "shell"


class UnknownCapability(Exception):
    """A client asked for a capability this server does not offer."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


def shell_description(sandbox_root: str) -> str:
    return f"""Run shell commands with gh CLI authenticated to GitHub.

Available commands:
- gh repo clone <owner/repo> -- clone a repository
- gh issue list/view/create -- manage issues
- gh pr list/view/create -- manage pull requests
- gh project list/view -- view projects
- ls, cat, grep, find, etc. -- inspect cloned code

Workspace: {sandbox_root} (use this for cloning repos)

Example workflow:
  gh repo clone facebook/react
  cd {sandbox_root}/react
  ls -la src/
  cat src/index.js"""


@dataclass
class ShellCapability:
    """Discovery entry for the shell capability."""

    sandbox_root: str
    name: str = SHELL_CAPABILITY

    @property
    def description(self) -> str:
        return shell_description(self.sandbox_root)

    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The shell command to execute",
                },
                "cwd": {
                    "type": "string",
                    "description": f"Working directory (default: {self.sandbox_root})",
                    "default": self.sandbox_root,
                },
            },
            "required": ["command"],
        }

    def to_tool(self) -> Dict[str, Any]:
        """Convert to the discovery wire format."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


class CapabilityModule:
    """
    Serves capability discovery and name resolution.

    The catalogue is fixed at construction: exactly one capability,
    regardless of server state.
    """

    def __init__(self, sandbox_root: str = "/workspace"):
        """
        Initialize capability module.

        Args:
            sandbox_root: Default working directory advertised to clients
        """
        self.shell = ShellCapability(sandbox_root=sandbox_root)

    def discover(self) -> List[Dict[str, Any]]:
        return [self.shell.to_tool()]

    def resolve(self, name: str) -> ShellCapability:
        """
        Look up a capability by name.

        Raises:
            UnknownCapability: Name is not offered
        """
        if name != self.shell.name:
            logger.info(f"Client requested unknown capability: {name}")
            raise UnknownCapability(name)
        return self.shell
