"""
Fake execution environment for tests: canned tool handlers, no processes
"""

import os
import sys
import threading

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from environment import ToolResult


class FakeEnvironment:
    """
    Stand-in for ExecutionEnvironment.

    Args:
        tools: dict binary -> handler(argv, input_text) returning a
               ToolResult, a stdout string, or raising
    """

    def __init__(self, tools=None):
        self.tools = dict(tools or {})
        self.extra_paths = []
        self.calls = []
        self._lock = threading.Lock()

    def prepend_path(self, directory):
        if directory not in self.extra_paths:
            self.extra_paths.insert(0, directory)
        return self

    def which(self, binary):
        if binary in self.tools:
            return f"/fake/bin/{binary}"
        return None

    def run(self, argv, input_text=None, timeout=None, cwd=None, env_overrides=None):
        binary = os.path.basename(argv[0])
        with self._lock:
            self.calls.append({
                'binary': binary,
                'args': list(argv[1:]),
                'input': input_text,
                'timeout': timeout,
                'env': dict(env_overrides or {}),
            })
        handler = self.tools[binary]
        result = handler(list(argv[1:]), input_text)
        if isinstance(result, ToolResult):
            return result
        return ToolResult(stdout=result or '')

    def calls_for(self, binary):
        return [c for c in self.calls if c['binary'] == binary and c['args'] != ['-version']]


def input_lines(input_text):
    return [l for l in (input_text or '').splitlines() if l.strip()]


def arg_after(args, flag):
    return args[args.index(flag) + 1]


def httpx_handler(live_hosts):
    """httpx that reports the given hosts as 200 and knows its identity."""
    def handler(args, input_text):
        if '-version' in args:
            return ToolResult(stderr='Current Version: v1.6.0 (projectdiscovery.io)')
        out = []
        for host in input_lines(input_text):
            bare = host.split('://', 1)[-1]
            if bare in live_hosts:
                out.append(f"https://{bare}")
        return '\n'.join(out) + '\n'
    return handler


def gospider_handler(files):
    """gospider that writes ``files`` (name -> text) into its -o directory."""
    def handler(args, input_text):
        raw_dir = arg_after(args, '-o')
        os.makedirs(raw_dir, exist_ok=True)
        for name, text in files.items():
            with open(os.path.join(raw_dir, name), 'w', encoding='utf-8') as f:
                f.write(text)
        return ''
    return handler


def mantra_handler(args, input_text):
    return f"\x1b[32m[+]\x1b[0m secret in {args[0]}\n"


def canned_tools():
    """Every pipeline tool with fixed outputs for example.com."""
    return {
        'subfinder': lambda args, stdin: "a.example.com\r\nb.example.com\n\n",
        'assetfinder': lambda args, stdin: "b.example.com\nc.example.com\n",
        'httpx': httpx_handler({'a.example.com', 'c.example.com'}),
        'gospider': gospider_handler({
            'a_example_com': (
                "[url] - [code-200] - https://a.example.com/app.js?v=1\n"
                "[href] - https://a.example.com/index.php\n"
                "[url] - [code-200] - https://a.example.com/app.js?v=1\n"
                "[linkfinder] - [from: https://a.example.com] - /api/x\n"
            ),
            'c_example_com': (
                "[javascript] - https://c.example.com/static/Main.JS\n"
                "[form] - https://c.example.com/login.PHP?next=/\n"
            ),
        }),
        'mantra': mantra_handler,
    }


def write_broken_binary(directory, name):
    """Executable file the OS refuses to run (Exec format error)."""
    path = os.path.join(directory, name)
    with open(path, 'wb') as f:
        f.write(b'\x00\x01garbage')
    os.chmod(path, 0o755)
    return path
