#!/usr/bin/env python3
"""
Reconpipe Output Manager
Run directories, artifact files and line-level dedupe
"""

import os
import threading
from datetime import datetime

import config


def ensure_dir(directory):
    """Create directory if it doesn't exist."""
    if not os.path.exists(directory):
        os.makedirs(directory)
    return directory


def timestamp():
    return datetime.now().strftime('%Y%m%d_%H%M%S')


def default_output_dir(domain):
    """Default run directory name: recon_<domain>_<timestamp>."""
    return f"recon_{domain}_{timestamp()}"


def clean_lines(lines):
    """Strip carriage returns and whitespace, drop blank lines."""
    for line in lines:
        line = line.replace('\r', '').strip()
        if line:
            yield line


def stable_unique(lines):
    """Dedupe keeping first-seen order."""
    seen = set()
    unique = []
    for line in lines:
        if line not in seen:
            seen.add(line)
            unique.append(line)
    return unique


def save_results(filepath, items):
    """
    Save a set or list of items to a file, sorted and deduplicated.

    Args:
        filepath: Output file path
        items: Set or list of strings to save

    Returns:
        int: Number of items saved
    """
    unique_items = sorted(set(clean_lines(items)))
    with open(filepath, 'w', encoding='utf-8') as f:
        for item in unique_items:
            f.write(f"{item}\n")
    return len(unique_items)


def count_lines(filepath):
    """Count non-empty lines in a file."""
    if not os.path.exists(filepath):
        return 0
    with open(filepath, 'r', encoding='utf-8', errors='replace') as f:
        return sum(1 for line in f if line.strip())


class ArtifactStore:
    """
    Named, line-oriented artifacts inside one run directory.

    Artifact names map to file names through ``config.ARTIFACTS``; unknown
    names are used as file names directly.
    """

    def __init__(self, root, names=None):
        self.root = root
        self.names = dict(config.ARTIFACTS if names is None else names)
        self._lock = threading.Lock()

    def ensure(self):
        ensure_dir(self.root)
        return self

    def path(self, name):
        return os.path.join(self.root, self.names.get(name, name))

    def exists(self, name):
        return os.path.isfile(self.path(name))

    def non_empty(self, name):
        return self.exists(name) and os.path.getsize(self.path(name)) > 0 and self.count(name) > 0

    def count(self, name):
        return count_lines(self.path(name))

    def read_lines(self, name):
        if not self.exists(name):
            return []
        with open(self.path(name), 'r', encoding='utf-8', errors='replace') as f:
            return list(clean_lines(f))

    def write(self, name, lines):
        """Replace an artifact with the given lines. Returns the line count."""
        lines = list(clean_lines(lines))
        with self._lock:
            with open(self.path(name), 'w', encoding='utf-8') as f:
                for line in lines:
                    f.write(f"{line}\n")
        return len(lines)

    def append(self, name, lines):
        """Append lines; safe to call from worker threads."""
        lines = list(clean_lines(lines))
        if not lines:
            return 0
        with self._lock:
            with open(self.path(name), 'a', encoding='utf-8') as f:
                f.write(''.join(f"{line}\n" for line in lines))
        return len(lines)

    def dedupe_merge(self, sources, dest):
        """
        Merge line lists and/or artifacts into ``dest`` without duplicates.

        Order is first-seen across the concatenated sources. Each source is
        either an artifact name or an iterable of lines.

        Returns:
            int: Number of unique lines written
        """
        merged = []
        for source in sources:
            if isinstance(source, str):
                merged.extend(self.read_lines(source))
            else:
                merged.extend(clean_lines(source))
        return self.write(dest, stable_unique(merged))

    def summary(self):
        """Line counts for every known artifact present on disk."""
        return {
            name: self.count(name)
            for name in self.names
            if self.exists(name)
        }
