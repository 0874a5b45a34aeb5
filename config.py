#!/usr/bin/env python3
"""
Reconpipe Configuration
Tool definitions, artifact names and run defaults
"""

import os


# ============================================================================
# RUN DEFAULTS
# ============================================================================

# Seconds allowed for a single external tool invocation
TOOL_TIMEOUT = int(os.getenv('RECONPIPE_TIMEOUT', '600'))

# Parallel mantra invocations during extraction
SCANNER_WORKERS = int(os.getenv('RECONPIPE_WORKERS', '4'))

# Where installed binaries land (prepended to the session search path)
INSTALL_DIR = os.path.expanduser(os.getenv('RECONPIPE_INSTALL_DIR', '~/go/bin'))

# Crawl depth used when no live host list is available
FALLBACK_CRAWL_DEPTH = 1

# HTTP status accepted by the liveness probe
LIVE_STATUS_CODES = '200'


# ============================================================================
# ARTIFACTS
# ============================================================================

ARTIFACTS = {
    'subdomains': 'allsubs.txt',
    'live': 'httpx_live.txt',
    'crawl': 'gospider.txt',
    'urls': 'allurls.txt',
    'js': 'js.txt',
    'php': 'php.txt',
    'secrets': 'mantra_results.txt',
}

CRAWL_RAW_DIR = 'gospider_raw'


# ============================================================================
# STAGES
# ============================================================================

# Fixed execution order
STAGE_ORDER = ['subdomains', 'live', 'urls', 'extract']

STAGE_ALIASES = {
    'subs': 'subdomains',
    'httpx': 'live',
    'crawl': 'urls',
    'gospider': 'urls',
    'js': 'extract',
}

STAGE_PROMPTS = {
    'subdomains': "Run subdomain discovery?",
    'live': "Run httpx (filter live hosts)?",
    'urls': "Collect URLs with gospider?",
    'extract': "Extract and analyze JS/PHP?",
}


# ============================================================================
# EXTERNAL TOOLS
# ============================================================================

# name -> (go package, GitHub release repo, identity marker, description)
REQUIRED_TOOLS = {
    'subfinder': {
        'go_package': 'github.com/projectdiscovery/subfinder/v2/cmd/subfinder@latest',
        'release_repo': 'projectdiscovery/subfinder',
        'description': 'Passive subdomain enumeration (ProjectDiscovery)',
    },
    'assetfinder': {
        'go_package': 'github.com/tomnomnom/assetfinder@latest',
        'release_repo': 'tomnomnom/assetfinder',
        'description': 'Passive subdomain enumeration (tomnomnom)',
    },
    'httpx': {
        'go_package': 'github.com/projectdiscovery/httpx/cmd/httpx@latest',
        'release_repo': 'projectdiscovery/httpx',
        # The Python httpx package ships a CLI with the same name
        'identity_marker': 'projectdiscovery',
        'description': 'HTTP liveness probe (ProjectDiscovery, Go)',
    },
    'gospider': {
        'go_package': 'github.com/jaeles-project/gospider@latest',
        'release_repo': 'jaeles-project/gospider',
        'description': 'Web crawler',
    },
    'mantra': {
        'go_package': 'github.com/Brosck/mantra@latest',
        'release_repo': 'Brosck/mantra',
        'description': 'Secret/API key hunter for JS files',
    },
}

GITHUB_API = 'https://api.github.com'
