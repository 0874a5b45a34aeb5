import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from stages.base import Stage, StageResult, Outcome


def run_subfinder(context):
    return context.registry.invoke('subfinder', ['-d', context.target, '-all', '-silent'])


def run_assetfinder(context):
    # assetfinder reads the domain from stdin
    return context.registry.invoke('assetfinder', ['--subs-only'], input_lines=[context.target])


ENUMERATORS = {
    'subfinder': run_subfinder,
    'assetfinder': run_assetfinder,
}


class SubdomainDiscovery(Stage):
    """Run every available enumerator and merge their output into allsubs.txt."""

    name = 'subdomains'
    title = 'Subdomain discovery'
    tools = tuple(ENUMERATORS)

    def run(self, context):
        outputs = []
        for tool in self.tools:
            if not context.registry.is_available(tool):
                context.say(f"    [!] {tool} not found; coverage reduced")
                continue

            result = ENUMERATORS[tool](context)
            self.report_failure(context, tool, result)
            found = [line for line in result.lines() if line.strip()]
            context.say(f"    [✓] {tool}: {len(found)} lines")
            outputs.append(found)

        count = context.store.dedupe_merge(outputs, 'subdomains')
        context.say(f"[✓] Saved {count} deduped subdomains -> {context.store.path('subdomains')}")
        return StageResult(self.name, Outcome.COMPLETED, ['subdomains'])
