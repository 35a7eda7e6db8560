import gzip
import os

import pytest

from tandem_test_utils import document_xml

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))


@pytest.fixture
def tiny_search_file():
    """The small X!Tandem output file shipped with the tests."""
    return os.path.join(TESTS_DIR, "data", "tiny_search.t.xml")


@pytest.fixture
def write_tandem_file(tmp_path):
    """Write a BIOML document built from group XML strings and return its path."""

    def _write(groups, filename="test_run.2024_01_01.t.xml", compress=False, **kwargs):
        text = document_xml(groups, **kwargs)
        path = tmp_path / filename
        if compress:
            with gzip.open(path, "wt") as outfile:
                outfile.write(text)
        else:
            path.write_text(text)
        return str(path)

    return _write
