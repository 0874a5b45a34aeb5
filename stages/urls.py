import sys
import os

# Add parent directory to path for config import
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import config
from output_manager import ensure_dir
from stages.base import Stage, StageResult, Outcome
from utils import extract_urls, with_scheme


def read_crawler_output(context, raw_dir):
    """Extract URL tokens from every file gospider wrote under raw_dir.

    Unreadable files are reported through context.say and skipped.
    """
    urls = []
    if not os.path.isdir(raw_dir):
        return urls

    for root, _dirs, files in sorted(os.walk(raw_dir)):
        for filename in sorted(files):
            path = os.path.join(root, filename)
            try:
                with open(path, 'r', encoding='utf-8', errors='replace') as f:
                    for line in f:
                        urls.extend(extract_urls(line))
            except OSError as e:
                context.say(f"    [!] Could not read {path}: {e}")
    return urls


class URLCollection(Stage):
    """Crawl live hosts (or the bare target at depth 1) and collect URLs."""

    name = 'urls'
    title = 'URL collection (gospider)'
    tools = ('gospider',)

    def crawl_args(self, context, raw_dir):
        if context.store.non_empty('live'):
            return ['-S', context.store.path('live'), '-o', raw_dir]
        return [
            '-d', str(config.FALLBACK_CRAWL_DEPTH),
            '-s', with_scheme(context.target),
            '-o', raw_dir,
        ]

    def run(self, context):
        raw_dir = ensure_dir(os.path.join(context.store.root, config.CRAWL_RAW_DIR))
        args = self.crawl_args(context, raw_dir)
        if '-S' not in args:
            context.say(f"    [*] No live host list; crawling {with_scheme(context.target)} at depth {config.FALLBACK_CRAWL_DEPTH}")

        result = context.registry.invoke('gospider', args)
        self.report_failure(context, 'gospider', result)

        urls = read_crawler_output(context, raw_dir)
        context.store.write('crawl', urls)

        if not urls:
            context.say("[!] No URLs collected by gospider.")
            context.store.write('urls', [])
            return StageResult(self.name, Outcome.COMPLETED, ['crawl', 'urls'], 'no urls')

        count = context.store.dedupe_merge(['crawl'], 'urls')
        context.say(f"[✓] Collected {count} URLs -> {context.store.path('urls')}")
        return StageResult(self.name, Outcome.COMPLETED, ['crawl', 'urls'])
