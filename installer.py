#!/usr/bin/env python3
"""
Reconpipe Installer
Tool status report, per-tool installation and PATH persistence.

Installation prefers ``go install`` (GOBIN pointed at the install
directory) and falls back to the latest GitHub release asset for the
current OS/architecture.
"""

import os
import platform
import re
import stat
import tarfile
import tempfile
import zipfile

import config
from utils import make_request


class MissingRequiredUtility(Exception):
    """Raised when the run must stop before any stage because tools are missing."""

    def __init__(self, missing):
        super().__init__(f"Missing required tools: {', '.join(missing)}")
        self.missing = list(missing)


# ============================================================================
# STATUS
# ============================================================================

def tool_status(registry, silent=False):
    """
    Report which registered tools are installed.

    Returns:
        dict: tool name -> bool
    """
    status = {}
    for name in registry.names():
        status[name] = registry.is_available(name)
        if not silent:
            mark = '✓' if status[name] else '✗'
            state = 'Installed' if status[name] else 'NOT FOUND'
            print(f"    [{mark}] {name}: {state}")
    return status


def check_tools(registry, strict=False, assume_yes=False, confirm=None, silent=False):
    """
    Warn about missing tools before the pipeline starts.

    Args:
        registry: ToolRegistry
        strict: Missing tools abort the run
        assume_yes: Proceed without asking
        confirm: Callable(question) -> bool used for the proceed prompt

    Returns:
        List of missing tool names

    Raises:
        MissingRequiredUtility: In strict mode, or when the operator declines
    """
    missing = registry.missing()
    if not missing:
        return []

    if not silent:
        print(f"[!] Missing suggested tools: {' '.join(missing)}")
        print("[!] Stages that need them will be skipped.")

    if strict:
        raise MissingRequiredUtility(missing)
    if assume_yes or confirm is None:
        return missing
    if not confirm("Proceed anyway?"):
        raise MissingRequiredUtility(missing)
    return missing


# ============================================================================
# GITHUB RELEASES
# ============================================================================

ARCH_ALIASES = {
    'x86_64': ('amd64', 'x86_64', 'x64'),
    'amd64': ('amd64', 'x86_64', 'x64'),
    'aarch64': ('arm64', 'aarch64'),
    'arm64': ('arm64', 'aarch64'),
    'i386': ('386', 'i386'),
    'i686': ('386', 'i386'),
    'armv7l': ('armv7', 'arm'),
    'armv6l': ('armv6', 'arm'),
}

OS_ALIASES = {
    'linux': ('linux',),
    'darwin': ('darwin', 'macos', 'mac'),
    'windows': ('windows', 'win'),
}

ARCHIVE_SUFFIXES = ('.zip', '.tar.gz', '.tgz')

TOKEN_DELIMITERS = re.compile(r'[_.-]')


def has_token(tokens, alias):
    """True if alias appears as whole delimiter-separated tokens (x86_64 spans two)."""
    wanted = TOKEN_DELIMITERS.split(alias)
    size = len(wanted)
    return any(tokens[i:i + size] == wanted for i in range(len(tokens) - size + 1))


def pick_release_asset(assets, system=None, machine=None):
    """
    Choose the release asset matching this OS and CPU.

    OS and CPU names must match whole tokens between `_`, `-` and `.`, so
    `arm` does not pick an arm64 build and `win` does not pick darwin.

    Args:
        assets: 'assets' list from the GitHub releases API
        system: OS name (defaults to platform.system())
        machine: CPU name (defaults to platform.machine())

    Returns:
        Asset dict or None
    """
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    os_names = OS_ALIASES.get(system, (system,))
    arch_names = ARCH_ALIASES.get(machine, (machine,))

    for asset in assets:
        name = asset.get('name', '').lower()
        if not name.endswith(ARCHIVE_SUFFIXES):
            continue
        tokens = TOKEN_DELIMITERS.split(name)
        if any(has_token(tokens, o) for o in os_names) and any(has_token(tokens, a) for a in arch_names):
            return asset
    return None


def fetch_latest_release(repo, silent=False):
    """Latest release JSON for owner/repo, or None."""
    url = f"{config.GITHUB_API}/repos/{repo}/releases/latest"
    headers = {'Accept': 'application/vnd.github+json'}
    token = os.getenv('GITHUB_TOKEN')
    if token:
        headers['Authorization'] = f"Bearer {token}"

    response = make_request(url, headers=headers, timeout=30, max_retries=3,
                            source_name=f"GitHub {repo}", silent=silent)
    if response is None:
        return None
    if response.status_code != 200:
        if not silent:
            print(f"    [!] GitHub API error for {repo}: HTTP {response.status_code}")
        return None
    return response.json()


def extract_binary(archive_path, binary, dest_dir):
    """
    Pull ``binary`` out of a .zip/.tar.gz archive into dest_dir.

    Returns:
        Path of the installed binary, or None if the archive lacks it
    """
    wanted = {binary, f"{binary}.exe"}
    dest = os.path.join(dest_dir, binary)

    if archive_path.endswith('.zip'):
        with zipfile.ZipFile(archive_path) as zf:
            member = next((m for m in zf.namelist() if os.path.basename(m) in wanted), None)
            if member is None:
                return None
            with zf.open(member) as src, open(dest, 'wb') as out:
                out.write(src.read())
    else:
        with tarfile.open(archive_path, 'r:gz') as tf:
            member = next((m for m in tf.getmembers()
                           if m.isfile() and os.path.basename(m.name) in wanted), None)
            if member is None:
                return None
            with tf.extractfile(member) as src, open(dest, 'wb') as out:
                out.write(src.read())

    mode = os.stat(dest).st_mode
    os.chmod(dest, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH | stat.S_IRUSR)
    return dest


def download_release(spec, install_dir, silent=False):
    """Install a tool from its latest GitHub release. Returns the binary path or None."""
    if not spec.release_repo:
        return None

    release = fetch_latest_release(spec.release_repo, silent=silent)
    if not release:
        return None

    asset = pick_release_asset(release.get('assets', []))
    if asset is None:
        if not silent:
            print(f"    [!] No release asset for {platform.system()}/{platform.machine()} in {spec.release_repo}")
        return None

    name = asset['name']
    response = make_request(asset['browser_download_url'], timeout=120, max_retries=3,
                            source_name=name, stream=True, silent=silent)
    if response is None or response.status_code != 200:
        if not silent:
            print(f"    [!] Download failed: {name}")
        return None

    suffix = '.zip' if name.lower().endswith('.zip') else '.tar.gz'
    with tempfile.TemporaryDirectory() as tmpdir:
        archive_path = os.path.join(tmpdir, f"asset{suffix}")
        with open(archive_path, 'wb') as f:
            for chunk in response.iter_content(chunk_size=65536):
                if chunk:
                    f.write(chunk)
        os.makedirs(install_dir, exist_ok=True)
        return extract_binary(archive_path, spec.binary, install_dir)


# ============================================================================
# INSTALLATION
# ============================================================================

def go_install(spec, environment, install_dir, silent=False):
    """Run `go install <package>` with GOBIN=install_dir. Returns True on success."""
    if not spec.go_package or not environment.which('go'):
        return False

    os.makedirs(install_dir, exist_ok=True)
    if not silent:
        print(f"    [*] go install -v {spec.go_package}")
    result = environment.run(
        ['go', 'install', '-v', spec.go_package],
        timeout=config.TOOL_TIMEOUT,
        env_overrides={'GOBIN': install_dir},
    )
    if not result.ok and not silent:
        tail = result.stderr.strip().splitlines()[-1:] or ['']
        print(f"    [!] go install failed for {spec.name}: {tail[0]}")
    return result.ok


def install_tool(spec, environment, install_dir, silent=False):
    """Install one tool, go toolchain first, GitHub release second."""
    if go_install(spec, environment, install_dir, silent):
        return True
    if not silent and not environment.which('go'):
        print(f"    [*] go not found; fetching {spec.name} release from GitHub")
    return download_release(spec, install_dir, silent) is not None


def shell_rc_file(shell=None, home=None):
    """Startup file for the operator's shell."""
    shell = shell if shell is not None else os.getenv('SHELL', '')
    home = home or os.path.expanduser('~')
    if os.path.basename(shell) == 'zsh':
        return os.path.join(home, '.zshrc')
    return os.path.join(home, '.bashrc')


def persist_path(install_dir, rc_file):
    """
    Add install_dir to PATH in the shell startup file, once.

    Returns:
        bool: True if the file was modified
    """
    line = f'export PATH="{install_dir}:$PATH"'
    if os.path.exists(rc_file):
        with open(rc_file, 'r', encoding='utf-8', errors='replace') as f:
            if any(l.strip() == line for l in f):
                return False

    with open(rc_file, 'a', encoding='utf-8') as f:
        f.write(f"\n# added by reconpipe\n{line}\n")
    return True


def run_setup(registry, install_dir=None, confirm=None, rc_file=None, silent=False):
    """
    Interactive setup phase: offer to install each missing tool.

    Args:
        registry: ToolRegistry (its environment gets install_dir prepended)
        install_dir: Destination for binaries
        confirm: Callable(question) -> bool; None installs without asking
        rc_file: Shell startup file to persist PATH into (None = detect)

    Returns:
        List of tool names installed
    """
    install_dir = os.path.expanduser(install_dir or config.INSTALL_DIR)
    environment = registry.environment
    environment.prepend_path(install_dir)
    registry.refresh()

    if not silent:
        print(f"\n[*] Checking recon tools (install dir: {install_dir})...")
    status = tool_status(registry, silent)
    missing = [name for name, ok in status.items() if not ok]
    if not missing:
        if not silent:
            print("[✓] All tools ready!\n")
        return []

    installed = []
    for name in missing:
        spec = registry.spec(name)
        if confirm is not None and not confirm(f"Install {name} ({spec.description})?"):
            continue
        try:
            ok = install_tool(spec, environment, install_dir, silent)
        except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
            ok = False
            if not silent:
                print(f"    [!] {name} install error: {e}")
        if ok:
            installed.append(name)
            if not silent:
                print(f"    [✓] {name} installed")
        elif not silent:
            print(f"    [✗] {name} was not installed")

    registry.refresh()

    if installed:
        rc_file = rc_file or shell_rc_file()
        try:
            if persist_path(install_dir, rc_file) and not silent:
                print(f"[✓] Added {install_dir} to PATH in {rc_file}")
        except OSError as e:
            if not silent:
                print(f"[!] Could not update {rc_file}: {e}")

    return installed
