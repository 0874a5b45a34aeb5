#!/usr/bin/env python3
"""
Tests for Reconpipe output manager (artifact store)
"""

import sys
import os
import re
import tempfile
import threading
import unittest

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from output_manager import (
    ArtifactStore, save_results, count_lines, clean_lines, stable_unique, default_output_dir,
)


class TestSaveResults(unittest.TestCase):
    """Test sorted-unique saving."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'out.txt')

    def tearDown(self):
        self.tmp.cleanup()

    def test_save_results(self):
        """Test saving results to file, sorted."""
        count = save_results(self.path, {'c.example.com', 'a.example.com', 'b.example.com'})
        self.assertEqual(count, 3)

        with open(self.path, 'r') as f:
            lines = [line.strip() for line in f if line.strip()]
        self.assertEqual(lines, ['a.example.com', 'b.example.com', 'c.example.com'])

    def test_save_results_dedup(self):
        """Test that save_results deduplicates and drops blanks."""
        count = save_results(self.path, ['a.com', 'b.com', 'a.com', '', '  ', 'b.com\r', 'c.com'])
        self.assertEqual(count, 3)
        self.assertEqual(count_lines(self.path), 3)

    def test_count_lines_missing_file(self):
        self.assertEqual(count_lines(os.path.join(self.tmp.name, 'nope.txt')), 0)


class TestLineHelpers(unittest.TestCase):

    def test_clean_lines(self):
        self.assertEqual(list(clean_lines(['a\r', '', ' b ', '\r\n'])), ['a', 'b'])

    def test_stable_unique_keeps_first_seen_order(self):
        self.assertEqual(stable_unique(['b', 'a', 'b', 'c', 'a']), ['b', 'a', 'c'])

    def test_default_output_dir(self):
        self.assertRegex(default_output_dir('example.com'), r'^recon_example\.com_\d{8}_\d{6}$')


class TestArtifactStore(unittest.TestCase):
    """Test artifact store operations."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = ArtifactStore(os.path.join(self.tmp.name, 'run')).ensure()

    def tearDown(self):
        self.tmp.cleanup()

    def test_paths_use_artifact_file_names(self):
        self.assertEqual(os.path.basename(self.store.path('subdomains')), 'allsubs.txt')
        self.assertEqual(os.path.basename(self.store.path('secrets')), 'mantra_results.txt')
        self.assertEqual(os.path.basename(self.store.path('custom.txt')), 'custom.txt')

    def test_exists_and_non_empty(self):
        self.assertFalse(self.store.exists('subdomains'))
        self.assertFalse(self.store.non_empty('subdomains'))

        self.store.write('subdomains', [])
        self.assertTrue(self.store.exists('subdomains'))
        self.assertFalse(self.store.non_empty('subdomains'))

        self.store.write('subdomains', ['a.example.com'])
        self.assertTrue(self.store.non_empty('subdomains'))

    def test_whitespace_only_file_is_empty(self):
        with open(self.store.path('live'), 'w') as f:
            f.write('\n  \n')
        self.assertFalse(self.store.non_empty('live'))

    def test_write_replaces(self):
        self.store.write('urls', ['a', 'b'])
        self.store.write('urls', ['c'])
        self.assertEqual(self.store.read_lines('urls'), ['c'])

    def test_append(self):
        self.store.append('secrets', ['one'])
        self.store.append('secrets', ['two', ''])
        self.assertEqual(self.store.read_lines('secrets'), ['one', 'two'])

    def test_dedupe_merge_preserves_first_seen_order(self):
        count = self.store.dedupe_merge(
            [['b.example.com', 'a.example.com\r', ''], ['a.example.com', 'c.example.com']],
            'subdomains',
        )
        self.assertEqual(count, 3)
        self.assertEqual(
            self.store.read_lines('subdomains'),
            ['b.example.com', 'a.example.com', 'c.example.com'],
        )

    def test_dedupe_merge_properties(self):
        """No duplicates, and every line comes from some source."""
        sources = [['x', 'y', 'x'], [], ['z', 'y'], ['w']]
        self.store.dedupe_merge(sources, 'urls')
        merged = self.store.read_lines('urls')
        self.assertEqual(len(merged), len(set(merged)))
        self.assertEqual(set(merged), {'x', 'y', 'z', 'w'})

    def test_dedupe_merge_from_artifacts(self):
        self.store.write('crawl', ['https://a', 'https://b', 'https://a'])
        self.store.dedupe_merge(['crawl'], 'urls')
        self.assertEqual(self.store.read_lines('urls'), ['https://a', 'https://b'])

    def test_concurrent_append_keeps_lines_whole(self):
        def worker(n):
            for i in range(50):
                self.store.append('secrets', [f"worker-{n}-line-{i}"])

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lines = self.store.read_lines('secrets')
        self.assertEqual(len(lines), 200)
        self.assertTrue(all(re.match(r'^worker-\d-line-\d+$', l) for l in lines))

    def test_summary(self):
        self.store.write('subdomains', ['a', 'b'])
        self.store.write('js', [])
        self.assertEqual(self.store.summary(), {'subdomains': 2, 'js': 0})


if __name__ == '__main__':
    unittest.main()
