#!/usr/bin/env python3
"""
Reconpipe Execution Environment
Search-path lookup and process spawning for external tools.

The environment keeps its own PATH instead of touching os.environ, so a
session can prepend an install directory without leaking it to the parent
process, and tests can swap in a fake.
"""

import os
import shutil
import subprocess

# Returncode reported when a binary exists but could not be started
EXEC_FAILED = 127


class ToolResult:
    """Captured output of one external process."""

    def __init__(self, stdout='', stderr='', returncode=0, timed_out=False):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.timed_out = timed_out

    @property
    def ok(self):
        return self.returncode == 0 and not self.timed_out

    def lines(self):
        return self.stdout.splitlines()

    def __repr__(self):
        return f"ToolResult(returncode={self.returncode}, timed_out={self.timed_out})"


def _decode(data):
    if data is None:
        return ''
    if isinstance(data, bytes):
        return data.decode('utf-8', errors='replace')
    return data


class ExecutionEnvironment:
    """Resolve binaries on a private search path and run them without a shell."""

    def __init__(self, extra_paths=None, base_env=None):
        self.base_env = dict(os.environ if base_env is None else base_env)
        self.extra_paths = [os.path.expanduser(p) for p in (extra_paths or [])]

    def prepend_path(self, directory):
        directory = os.path.expanduser(directory)
        if directory not in self.extra_paths:
            self.extra_paths.insert(0, directory)
        return self

    def search_path(self):
        parts = list(self.extra_paths)
        base = self.base_env.get('PATH', os.defpath)
        parts.extend(p for p in base.split(os.pathsep) if p)
        return os.pathsep.join(parts)

    def env(self, overrides=None):
        env = dict(self.base_env)
        env['PATH'] = self.search_path()
        if overrides:
            env.update(overrides)
        return env

    def which(self, binary):
        return shutil.which(binary, path=self.search_path())

    def run(self, argv, input_text=None, timeout=None, cwd=None, env_overrides=None):
        """
        Run an argument vector and capture its output.

        Args:
            argv: Command as a list; argv[0] is resolved on the search path
            input_text: Text fed to stdin (None closes stdin)
            timeout: Seconds before the process is killed
            cwd: Working directory
            env_overrides: Extra environment variables for this call

        Returns:
            ToolResult. A timeout is reported through ``timed_out`` with any
            output captured before the kill. A binary that cannot be
            started yields returncode EXEC_FAILED with the OS error as stderr.
        """
        resolved = self.which(argv[0]) or argv[0]
        try:
            completed = subprocess.run(
                [resolved] + list(argv[1:]),
                input=input_text,
                stdin=None if input_text is not None else subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors='replace',
                timeout=timeout,
                cwd=cwd,
                env=self.env(env_overrides),
            )
        except subprocess.TimeoutExpired as e:
            return ToolResult(_decode(e.stdout), _decode(e.stderr), returncode=None, timed_out=True)
        except OSError as e:
            # Exec format error, bad interpreter, permission denied
            return ToolResult(stderr=str(e), returncode=EXEC_FAILED)
        return ToolResult(completed.stdout, completed.stderr, completed.returncode)
