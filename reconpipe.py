#!/usr/bin/env python3
"""
Reconpipe - Light Recon Pipeline
subfinder/assetfinder -> httpx -> gospider -> JS/PHP extraction + mantra

WARNING: use only on targets you have permission to test.
"""

import sys
import os

# Add current directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '.')))

from cli import print_banner, parse_args, build_run_config, make_confirm, ask_yes_no
from environment import ExecutionEnvironment
from installer import MissingRequiredUtility, check_tools, run_setup
from orchestrator import run_pipeline
from tool_registry import ToolRegistry


def main(argv=None, input_func=input, environment=None):
    """
    Run the front-end and the pipeline.

    Returns:
        int: Exit code (0 success, 1 missing domain/tools, 130 interrupted)
    """
    args = parse_args(argv)

    # Silent mode suppresses banner and progress
    if not args.silent:
        print_banner()

    environment = environment or ExecutionEnvironment([args.install_dir])
    registry = ToolRegistry(environment, timeout=args.timeout)
    interactive = not args.domain

    try:
        if args.setup:
            run_setup(registry, args.install_dir, make_confirm(args.yes, input_func), silent=args.silent)
            if interactive:
                return 0
        elif interactive and registry.missing():
            if ask_yes_no("Some recon tools are missing. Run setup now?", input_func):
                run_setup(registry, args.install_dir, make_confirm(False, input_func), silent=args.silent)

        try:
            check_tools(
                registry,
                strict=args.strict,
                assume_yes=args.yes or not interactive,
                confirm=make_confirm(False, input_func),
                silent=args.silent,
            )
        except MissingRequiredUtility as e:
            print(f"[-] {e}. Aborting.")
            return 1

        run_config = build_run_config(args, input_func)
        if run_config is None:
            return 1

        run_pipeline(run_config, registry)

    except KeyboardInterrupt:
        print("\n[!] Interrupted.")
        return 130
    except EOFError:
        print("\n[-] No input. Exiting.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
