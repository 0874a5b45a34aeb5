#!/usr/bin/env python3
"""
Reconpipe Utilities
Domain validation, URL helpers and the retrying HTTP request helper
"""

import re
import time
import requests


# ============================================================================
# DOMAIN VALIDATION
# ============================================================================

# Valid domain regex pattern
DOMAIN_PATTERN = re.compile(
    r'^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$'
)


def normalize_domain(raw):
    """Remove all whitespace and lower-case the domain."""
    if not raw:
        return ''
    return re.sub(r'\s+', '', raw).lower()


def is_valid_domain(domain):
    """
    Validate that a string is a properly formatted domain name.

    Args:
        domain: String to validate

    Returns:
        bool: True if valid domain format
    """
    if not domain or not isinstance(domain, str):
        return False

    domain = domain.strip().lower()

    # Check length
    if len(domain) > 253 or len(domain) < 4:
        return False

    # Check pattern
    return bool(DOMAIN_PATTERN.match(domain))


# ============================================================================
# URL HELPERS
# ============================================================================

URL_PATTERN = re.compile(r'https?://[^\s"\'<>`\[\]]+', re.IGNORECASE)

ANSI_PATTERN = re.compile(r'\x1b\[[0-9;]*[A-Za-z]')


def extract_urls(text):
    """Return every URL-shaped token in text, in order of appearance."""
    return [m.rstrip('),;') for m in URL_PATTERN.findall(text or '')]


def strip_query(url):
    """Drop the query string and fragment: https://x/a.js?v=1#t -> https://x/a.js"""
    return re.sub(r'[?#].*$', '', url.strip())


def has_suffix(url, suffix):
    """Case-insensitive extension check on the URL with query/fragment removed."""
    return strip_query(url).lower().endswith(suffix.lower())


def filter_by_suffix(urls, suffix):
    """Normalized URLs whose path ends with ``suffix``."""
    return [strip_query(u) for u in urls if has_suffix(u, suffix)]


def strip_ansi(text):
    return ANSI_PATTERN.sub('', text or '')


def with_scheme(host, scheme='https'):
    if re.match(r'^[a-zA-Z][a-zA-Z0-9+.-]*://', host):
        return host
    return f"{scheme}://{host}"


# ============================================================================
# HTTP REQUEST HELPER
# ============================================================================

def make_request(url, headers=None, params=None, timeout=30, max_retries=3,
                 source_name="API", stream=False, silent=False):
    """
    Make an HTTP GET request with automatic retry and error handling.

    Args:
        url: Request URL
        headers: Request headers dict
        params: Query parameters dict
        timeout: Request timeout in seconds
        max_retries: Number of retries on failure
        source_name: Name of the source for error messages
        stream: Stream the response body (downloads)
        silent: Suppress retry messages

    Returns:
        requests.Response object or None on failure
    """
    delay = 5

    def say(msg):
        if not silent:
            print(msg)

    for attempt in range(max_retries + 1):
        try:
            response = requests.get(url, headers=headers, params=params,
                                    timeout=timeout, stream=stream)

            # Handle rate limiting (GitHub answers 403 with a reset header too)
            if response.status_code == 429 or (
                    response.status_code == 403 and response.headers.get('X-RateLimit-Remaining') == '0'):
                if attempt < max_retries:
                    retry_after = int(response.headers.get('Retry-After', delay))
                    say(f"    [!] {source_name} rate limited - waiting {retry_after}s (attempt {attempt + 1}/{max_retries})")
                    time.sleep(retry_after)
                    delay *= 2
                    continue
                else:
                    say(f"    [!] {source_name} rate limited - max retries reached")
                    return None

            # Handle server errors
            if response.status_code in (500, 502, 503, 504):
                if attempt < max_retries:
                    say(f"    [!] {source_name} server error (HTTP {response.status_code}) - retrying in {delay}s (attempt {attempt + 1}/{max_retries})")
                    time.sleep(delay)
                    delay *= 2
                    continue
                else:
                    say(f"    [!] {source_name} server error (HTTP {response.status_code}) - max retries reached")
                    return None

            return response

        except requests.exceptions.Timeout:
            if attempt < max_retries:
                say(f"    [!] {source_name} timeout - retrying in {delay}s (attempt {attempt + 1}/{max_retries})")
                time.sleep(delay)
                delay *= 2
            else:
                say(f"    [!] {source_name} timeout - max retries reached")
                return None

        except requests.exceptions.ConnectionError:
            if attempt < max_retries:
                say(f"    [!] {source_name} connection error - retrying in {delay}s (attempt {attempt + 1}/{max_retries})")
                time.sleep(delay)
                delay *= 2
            else:
                say(f"    [!] {source_name} connection error - max retries reached")
                return None

        except requests.exceptions.RequestException as e:
            say(f"    [!] {source_name} request error: {str(e)}")
            return None

    return None
