#!/usr/bin/env python3
"""
Reconpipe CLI - Command Line Interface
Argument parsing, banner display and interactive prompts
"""

import argparse

import config
from output_manager import default_output_dir
from orchestrator import RunConfig
from utils import is_valid_domain, normalize_domain


BANNER = """
    ╔═══════════════════════════════════════════════════════╗
    ║         Reconpipe                                     ║
    ║         Light Recon Pipeline                          ║
    ║                                                       ║
    ║  Stages: subfinder + assetfinder -> httpx ->          ║
    ║          gospider -> JS/PHP split + mantra            ║
    ║                                                       ║
    ║  Missing tools skip their stage, never the run.       ║
    ║  Use only on targets you have permission to test.     ║
    ╚═══════════════════════════════════════════════════════╝
    """


def print_banner():
    """Print the Reconpipe banner."""
    print(BANNER)


def parse_args(argv=None):
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Reconpipe - Subdomain discovery, liveness probing, crawling and JS secret hunting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 reconpipe.py                                   # Interactive prompts
  python3 reconpipe.py -d example.com --all
  python3 reconpipe.py -d example.com --stages subs,httpx
  python3 reconpipe.py -d example.com --all -o out/ --workers 8
  python3 reconpipe.py --setup                           # Install missing tools
  python3 reconpipe.py -d example.com --all --strict     # Abort if any tool is missing

Stages (--stages, in execution order):
  subdomains (subs), live (httpx), urls (crawl, gospider), extract (js)

Output Structure:
  recon_example.com_20260105_101500/
  |-- allsubs.txt            (subfinder + assetfinder, deduped)
  |-- httpx_live.txt         (HTTP 200 hosts)
  |-- gospider_raw/          (crawler output)
  |-- gospider.txt           (URLs extracted from gospider_raw)
  |-- allurls.txt            (deduped URLs)
  |-- js.txt / php.txt       (sorted, query strings stripped)
  +-- mantra_results.txt     (secrets found in JS files)
        """
    )

    parser.add_argument('-d', '--domain', type=str, help="Target domain (prompted when omitted)")
    parser.add_argument('-o', '--output', type=str, metavar='DIR', help="Output folder (default: recon_<domain>_<timestamp>)")
    parser.add_argument('--stages', type=str, metavar='STAGES', help="Comma-separated stages to run")
    parser.add_argument('--all', action='store_true', help="Run every stage")
    parser.add_argument('--setup', action='store_true', help="Offer to install missing tools before running")
    parser.add_argument('-y', '--yes', action='store_true', help="Answer yes to proceed/install prompts")
    parser.add_argument('--strict', action='store_true', help="Abort when any tool is missing")
    parser.add_argument('--timeout', type=int, default=config.TOOL_TIMEOUT, metavar='SEC',
                        help=f"Timeout per external tool call (default: {config.TOOL_TIMEOUT})")
    parser.add_argument('--workers', type=int, default=config.SCANNER_WORKERS, metavar='N',
                        help=f"Parallel mantra scans (default: {config.SCANNER_WORKERS})")
    parser.add_argument('--install-dir', type=str, default=config.INSTALL_DIR, metavar='DIR',
                        help=f"Where tools are installed (default: {config.INSTALL_DIR})")
    parser.add_argument('--silent', action='store_true', help="Silent mode - no banner/progress")

    return parser.parse_args(argv)


def parse_stages(stages_str):
    """
    Parse the --stages argument into a set of stage names.

    Supports shorthand aliases (subs, httpx, crawl, gospider, js).

    Returns:
        frozenset of stage names, or None if the flag was not given. A value
        with no valid stage name in it gives an empty frozenset.
    """
    if stages_str is None:
        return None

    stages = set()
    for s in stages_str.split(','):
        s = s.strip().lower()
        if not s:
            continue
        s = config.STAGE_ALIASES.get(s, s)
        if s in config.STAGE_ORDER:
            stages.add(s)
        else:
            print(f"[!] Unknown stage: {s} (available: {', '.join(config.STAGE_ORDER)})")

    return frozenset(stages)


# ============================================================================
# PROMPTS
# ============================================================================

def ask(question, default='', input_func=input):
    answer = input_func(f"{question} ").strip()
    return answer or default


def ask_yes_no(question, input_func=input):
    """y/N prompt; anything but y/yes is no."""
    return ask(f"{question} (y/N):", input_func=input_func).lower() in ('y', 'yes')


def make_confirm(assume_yes=False, input_func=input):
    """Confirmation callable for installer prompts."""
    if assume_yes:
        return lambda question: True
    return lambda question: ask_yes_no(question, input_func=input_func)


def build_run_config(args, input_func=input):
    """
    Build the RunConfig from flags, prompting for whatever is missing.

    Returns:
        RunConfig, or None when the domain is empty or invalid, or when
        --stages names no valid stage
    """
    interactive = not args.domain
    raw = args.domain if args.domain else input_func("Domain (example: example.com): ")
    domain = normalize_domain(raw)

    if not domain:
        print("[-] Domain required. Exiting.")
        return None
    if not is_valid_domain(domain):
        print(f"[-] Invalid domain format: {domain}")
        return None

    enabled = frozenset(config.STAGE_ORDER) if args.all else parse_stages(args.stages)
    if enabled is not None and not enabled:
        print(f"[-] No valid stage in --stages '{args.stages}'. Exiting.")
        return None

    output_dir = args.output
    if not output_dir:
        default = default_output_dir(domain)
        output_dir = ask(f"Output folder (default: {default}):", default, input_func) if interactive else default

    if enabled is None:
        if interactive:
            print()
            enabled = frozenset(
                stage for stage in config.STAGE_ORDER
                if ask_yes_no(config.STAGE_PROMPTS[stage], input_func)
            )
        else:
            enabled = frozenset(config.STAGE_ORDER)

    return RunConfig(
        target=domain,
        output_dir=output_dir,
        enabled_stages=enabled,
        silent=args.silent,
        timeout=args.timeout,
        scanner_workers=args.workers,
    )
