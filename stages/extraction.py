import sys
import os
from concurrent.futures import ThreadPoolExecutor, as_completed

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from output_manager import save_results
from stages.base import Stage, StageResult, Outcome
from utils import filter_by_suffix, strip_ansi


def scan_js_file(registry, url):
    """Run mantra against one JS URL. Returns (ANSI-stripped output lines, ToolResult)."""
    result = registry.invoke('mantra', [url])
    return [strip_ansi(line) for line in result.lines()], result


class Extraction(Stage):
    """
    Split allurls.txt into js.txt / php.txt and hunt secrets in the JS files.

    mantra runs once per JS URL on a fixed-width pool; the collecting thread
    is the only writer of mantra_results.txt.
    """

    name = 'extract'
    title = 'JS/PHP extraction'
    tools = ()

    def run(self, context):
        store = context.store
        if not store.non_empty('urls'):
            context.say(f"[!] No URLs file ({store.path('urls')}) found; cannot extract JS/PHP.")
            return StageResult(self.name, Outcome.SKIPPED_NO_INPUT, message='no urls')

        urls = store.read_lines('urls')
        js_count = save_results(store.path('js'), filter_by_suffix(urls, '.js'))
        php_count = save_results(store.path('php'), filter_by_suffix(urls, '.php'))
        context.say(f"[✓] JS files: {js_count} -> {store.path('js')}")
        context.say(f"[✓] PHP files: {php_count} -> {store.path('php')}")
        artifacts = ['js', 'php']

        if not context.registry.is_available('mantra'):
            context.say("[!] mantra not found; skipping secret scan")
        elif js_count == 0:
            context.say("[*] No JS files to scan")
        else:
            self.scan(context, store.read_lines('js'))
            artifacts.append('secrets')

        return StageResult(self.name, Outcome.COMPLETED, artifacts)

    def scan(self, context, js_urls):
        workers = max(1, context.config.scanner_workers)
        context.say(f"[*] Running mantra on {len(js_urls)} JS files ({workers} workers)...")

        # Re-derived on every run
        context.store.write('secrets', [])
        findings = 0
        failed = 0
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_url = {
                executor.submit(scan_js_file, context.registry, url): url
                for url in js_urls
            }

            for future in as_completed(future_to_url):
                url = future_to_url[future]
                try:
                    lines, result = future.result()
                except Exception as e:
                    failed += 1
                    context.say(f"    [✗] mantra {url}: {e}")
                    continue
                if not result.ok:
                    failed += 1
                    self.report_failure(context, f"mantra {url}", result)
                findings += context.store.append('secrets', lines)

        context.say(f"[✓] mantra results: +{findings} lines ({failed} failed) -> {context.store.path('secrets')}")
        return findings
