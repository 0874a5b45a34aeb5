#!/usr/bin/env python3
"""
Reconpipe Tool Registry
Maps logical tool names to binaries, availability checks and invocation
"""

from dataclasses import dataclass

import config
from environment import EXEC_FAILED, ExecutionEnvironment


class MissingToolError(Exception):
    """Raised when a tool is invoked but its binary is not on the search path."""

    def __init__(self, name):
        super().__init__(f"{name} not found on search path")
        self.name = name


@dataclass(frozen=True)
class ToolSpec:
    name: str
    binary: str
    go_package: str = ''
    release_repo: str = ''
    identity_marker: str = ''
    description: str = ''


def default_specs():
    """Build ToolSpecs from config.REQUIRED_TOOLS."""
    specs = {}
    for name, info in config.REQUIRED_TOOLS.items():
        specs[name] = ToolSpec(
            name=name,
            binary=info.get('binary', name),
            go_package=info.get('go_package', ''),
            release_repo=info.get('release_repo', ''),
            identity_marker=info.get('identity_marker', ''),
            description=info.get('description', ''),
        )
    return specs


class ToolRegistry:
    """
    Availability checks and structured invocation for external tools.

    Args:
        environment: ExecutionEnvironment (or a fake with which/run)
        specs: Dict of name -> ToolSpec; defaults to config.REQUIRED_TOOLS
        timeout: Default per-call timeout in seconds
    """

    def __init__(self, environment=None, specs=None, timeout=None):
        self.environment = environment or ExecutionEnvironment([config.INSTALL_DIR])
        self.specs = dict(specs) if specs is not None else default_specs()
        self.timeout = timeout if timeout is not None else config.TOOL_TIMEOUT
        self._availability = {}

    def spec(self, name):
        return self.specs[name]

    def names(self):
        return list(self.specs)

    def _verify_identity(self, path, marker):
        # Same check as the httpx shadowing guard: ask the binary who it is
        result = self.environment.run([path, '-version'], timeout=10)
        if result.returncode == EXEC_FAILED:
            return False
        output = f"{result.stdout}\n{result.stderr}".lower()
        return marker.lower() in output

    def resolve(self, name):
        """Return the binary path for a tool, or None if unavailable."""
        spec = self.specs.get(name)
        if spec is None:
            return None

        path = self.environment.which(spec.binary)
        if not path:
            return None
        if spec.identity_marker and not self._verify_identity(path, spec.identity_marker):
            return None
        return path

    def is_available(self, name):
        if name not in self._availability:
            self._availability[name] = self.resolve(name) is not None
        return self._availability[name]

    def refresh(self):
        """Forget cached availability (after installing tools)."""
        self._availability.clear()

    def missing(self, names=None):
        names = self.names() if names is None else names
        return [name for name in names if not self.is_available(name)]

    def invoke(self, name, args, input_lines=None, timeout=None, cwd=None):
        """
        Invoke a registered tool with an argument vector.

        Args:
            name: Logical tool name
            args: Arguments after the binary
            input_lines: Optional iterable of lines written to stdin
            timeout: Override for the default timeout
            cwd: Working directory

        Returns:
            ToolResult. Non-zero exits and timeouts are returned, not raised.

        Raises:
            MissingToolError: If the tool is not available
        """
        path = self.resolve(name)
        if path is None:
            raise MissingToolError(name)

        input_text = None
        if input_lines is not None:
            input_text = ''.join(f"{line}\n" for line in input_lines)

        return self.environment.run(
            [path] + list(args),
            input_text=input_text,
            timeout=timeout if timeout is not None else self.timeout,
            cwd=cwd,
        )
