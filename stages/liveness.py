import sys
import os

# Add parent directory to path for config import
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import config
from stages.base import Stage, StageResult, Outcome
from utils import with_scheme


class LivenessProbe(Stage):
    """
    Probe hosts with httpx and keep those answering with HTTP 200.

    Reads allsubs.txt when it holds anything; otherwise probes only
    https://<target>.
    """

    name = 'live'
    title = 'Liveness probe (httpx)'
    tools = ('httpx',)

    def hosts(self, context):
        if context.store.non_empty('subdomains'):
            return context.store.read_lines('subdomains'), False
        return [with_scheme(context.target)], True

    def run(self, context):
        hosts, fallback = self.hosts(context)
        if fallback:
            context.say(f"    [*] No subdomain list; probing {hosts[0]}")
        else:
            context.say(f"    [*] Probing {len(hosts)} hosts")

        result = context.registry.invoke(
            'httpx',
            ['-silent', '-no-color', '-mc', config.LIVE_STATUS_CODES],
            input_lines=hosts,
        )
        self.report_failure(context, 'httpx', result)

        count = context.store.dedupe_merge([result.lines()], 'live')
        context.say(f"[✓] Live hosts: {count} -> {context.store.path('live')}")
        message = 'fallback to target' if fallback else ''
        return StageResult(self.name, Outcome.COMPLETED, ['live'], message)
