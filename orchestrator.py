#!/usr/bin/env python3
"""
Reconpipe Orchestrator
Runs the recon stages in fixed order against one target
"""

import time
from dataclasses import dataclass, field

import config
from output_manager import ArtifactStore
from stages.base import PipelineContext
from stages.subdomains import SubdomainDiscovery
from stages.liveness import LivenessProbe
from stages.urls import URLCollection
from stages.extraction import Extraction


# ============================================================================
# RUN CONFIGURATION
# ============================================================================

@dataclass(frozen=True)
class RunConfig:
    target: str
    output_dir: str
    enabled_stages: frozenset = field(default_factory=frozenset)
    silent: bool = False
    timeout: int = config.TOOL_TIMEOUT
    scanner_workers: int = config.SCANNER_WORKERS


# ============================================================================
# STAGE MAPPING
# ============================================================================

def build_stages():
    """Stages in execution order; each one's default input is the previous one's output."""
    return [SubdomainDiscovery(), LivenessProbe(), URLCollection(), Extraction()]


# ============================================================================
# PIPELINE
# ============================================================================

def run_pipeline(run_config, registry, store=None, stages=None):
    """
    Run every stage in order, skipping rather than aborting.

    Args:
        run_config: RunConfig
        registry: ToolRegistry used by all stages; its per-call timeout is
            set from run_config.timeout
        store: ArtifactStore (defaults to one rooted at run_config.output_dir)
        stages: Stage list override, in order

    Returns:
        List of StageResult, one per stage
    """
    store = (store or ArtifactStore(run_config.output_dir)).ensure()
    registry.timeout = run_config.timeout
    context = PipelineContext(run_config, registry, store)

    if not run_config.silent:
        print(f"\n{'='*60}")
        print(f"[*] Target: {run_config.target}")
        print(f"[*] Output: {store.root}")
        print(f"[*] Stages: {', '.join(s for s in config.STAGE_ORDER if s in run_config.enabled_stages) or 'none'}")
        print(f"{'='*60}")

    results = []
    start_time = time.time()

    for stage in (stages or build_stages()):
        stage_start = time.time()
        result = stage.execute(context)
        results.append(result)
        if result.completed:
            context.say(f"    [⏱] {stage.title} took {time.time() - stage_start:.2f}s")

    if not run_config.silent:
        print_summary(results, store, time.time() - start_time)

    return results


def print_summary(results, store, elapsed):
    print(f"\n{'='*60}")
    print(f"[✓] Pipeline finished in {elapsed:.2f} seconds")
    for result in results:
        detail = f" ({result.message})" if result.message else ''
        print(f"    - {result.stage:<11} {result.outcome.value}{detail}")

    counts = store.summary()
    if counts:
        print("\n[*] Artifacts:")
        for name, count in counts.items():
            print(f"    - {store.path(name)}: {count} lines")
    print(f"\n[✓] Check {store.root} for results.")
    print(f"{'='*60}\n")
