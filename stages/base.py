import sys
import os
from enum import Enum

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from tool_registry import MissingToolError


class Outcome(Enum):
    COMPLETED = 'Completed'
    SKIPPED_MISSING_TOOL = 'SkippedMissingTool'
    SKIPPED_DISABLED = 'SkippedDisabled'
    SKIPPED_NO_INPUT = 'SkippedNoInput'


class StageResult:
    def __init__(self, stage, outcome, artifacts=None, message=''):
        self.stage = stage
        self.outcome = outcome
        self.artifacts = list(artifacts or [])
        self.message = message

    @property
    def completed(self):
        return self.outcome is Outcome.COMPLETED

    def __repr__(self):
        return f"StageResult({self.stage!r}, {self.outcome.value}, artifacts={self.artifacts})"


class PipelineContext:
    """Everything a stage needs: run config, tool registry, artifact store."""

    def __init__(self, run_config, registry, store):
        self.config = run_config
        self.registry = registry
        self.store = store

    @property
    def target(self):
        return self.config.target

    @property
    def silent(self):
        return self.config.silent

    def say(self, msg):
        if not self.config.silent:
            print(msg)


class Stage:
    """
    One pipeline step.

    Subclasses set ``name``, ``tools`` and implement ``run``. ``tools`` are
    alternatives: the stage runs when at least one is available. A stage
    that needs no external tool leaves ``tools`` empty.
    """

    name = ''
    title = ''
    tools = ()

    def available_tools(self, context):
        return [t for t in self.tools if context.registry.is_available(t)]

    def execute(self, context):
        """Disabled -> CheckingTool -> {SkippedMissingTool, Running} -> {SkippedNoInput, Completed}"""
        if self.name not in context.config.enabled_stages:
            context.say(f"[*] Skipping {self.title}")
            return StageResult(self.name, Outcome.SKIPPED_DISABLED)

        if self.tools and not self.available_tools(context):
            context.say(f"[!] {', '.join(self.tools)} not found; skipping {self.title}.")
            return StageResult(self.name, Outcome.SKIPPED_MISSING_TOOL,
                               message=f"missing: {', '.join(self.tools)}")

        context.say(f"\n[+] {self.title}")
        try:
            return self.run(context)
        except MissingToolError as e:
            # Tool vanished between the check and the call
            context.say(f"[!] {e}; skipping {self.title}.")
            return StageResult(self.name, Outcome.SKIPPED_MISSING_TOOL, message=str(e))

    def run(self, context):
        raise NotImplementedError

    def report_failure(self, context, tool, result):
        """Warn about a non-zero exit or timeout; partial output is still used."""
        if result.timed_out:
            context.say(f"    [!] {tool} timed out; keeping partial output")
        elif result.returncode != 0:
            detail = result.stderr.strip().splitlines()[-1] if result.stderr.strip() else ''
            context.say(f"    [!] {tool} exited with status {result.returncode} {detail}".rstrip())
