#!/usr/bin/env python3
"""
Tests for CDX line parsing and document task filtering.
"""

import sys
from pathlib import Path

# Add the src directory to the path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from waybackdocs.core.task_filter import (
    DownloadTask, build_tasks, is_document_url, iter_tasks, parse_record,
)


INDEX_LINES = [
    "com,example)/a.pdf 20100101000000 http://example.com/a.pdf application/pdf 200 ABC 1234",
    "com,example)/notes.txt 20100101000001 http://example.com/notes.txt text/plain 200 ABC 10",
    "short line",
    "com,example)/b.DOCX 20110101000000 http://example.com/b.DOCX application/msword 200 ABC 99",
    "com,example)/mail.eml 20110101000001 http://example.com/mail.eml message/rfc822 200 ABC 5",
    "",
    "com,example)/c.doc 20120101000000 https://www.example.com/files/c.doc application/msword 200 ABC 7",
]


def test_parse_record_requires_three_fields():
    assert parse_record("") is None
    assert parse_record("one two") is None
    assert parse_record("key 2001 http://x/y.pdf") == ("2001", "http://x/y.pdf")
    assert parse_record("  key\t2001   http://x/y.pdf  extra ") == ("2001", "http://x/y.pdf")


def test_is_document_url_is_case_insensitive():
    assert is_document_url("http://example.com/a.pdf")
    assert is_document_url("http://example.com/A.PDF")
    assert is_document_url("http://example.com/a.Doc")
    assert is_document_url("http://example.com/a.docx")
    assert not is_document_url("http://example.com/a.txt")
    assert not is_document_url("http://example.com/a.eml")
    assert not is_document_url("http://example.com/a.pdf?download=1")


def test_build_tasks_keeps_only_documents_in_stream_order():
    tasks = build_tasks(INDEX_LINES)
    assert tasks == [
        DownloadTask("20100101000000", "http://example.com/a.pdf"),
        DownloadTask("20110101000000", "http://example.com/b.DOCX"),
        DownloadTask("20120101000000", "https://www.example.com/files/c.doc"),
    ]
    for task in tasks:
        assert task.original_url.lower().endswith((".doc", ".docx", ".pdf"))


def test_short_lines_never_produce_tasks():
    assert build_tasks(["", "a", "a b", "x y.pdf", "  "]) == []


def test_cap_takes_first_matching_records():
    tasks = build_tasks(INDEX_LINES, max_tasks=2)
    assert [t.original_url for t in tasks] == [
        "http://example.com/a.pdf",
        "http://example.com/b.DOCX",
    ]
    # Cap larger than the number of matches yields every match
    assert len(build_tasks(INDEX_LINES, max_tasks=10)) == 3
    # Zero means unlimited
    assert len(build_tasks(INDEX_LINES, max_tasks=0)) == 3


def test_cap_stops_reading_the_stream():
    consumed = []

    def lines():
        for line in INDEX_LINES:
            consumed.append(line)
            yield line

    tasks = list(iter_tasks(lines(), max_tasks=1))
    assert len(tasks) == 1
    assert consumed == INDEX_LINES[:1]


def test_wayback_url():
    task = DownloadTask("20100101000000", "http://example.com/a.pdf")
    assert task.wayback_url() == "https://web.archive.org/web/20100101000000/http://example.com/a.pdf"
    assert task.wayback_url("archive.test") == "https://archive.test/web/20100101000000/http://example.com/a.pdf"


if __name__ == "__main__":
    test_parse_record_requires_three_fields()
    test_is_document_url_is_case_insensitive()
    test_build_tasks_keeps_only_documents_in_stream_order()
    test_short_lines_never_produce_tasks()
    test_cap_takes_first_matching_records()
    test_cap_stops_reading_the_stream()
    test_wayback_url()
    print("✓ task filter tests passed")
