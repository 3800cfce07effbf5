"""Configuration file for pytest."""
import sys
from pathlib import Path

import pytest

# Add the parent directory to the path so we can import seqtagger,
# and this directory so the tests can import their helpers
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from helpers import FakeEmbedder, export_dense_tagger  # noqa: E402


@pytest.fixture
def fake_embedder():
    """A deterministic stand-in for the pretrained encoder."""
    return FakeEmbedder()


@pytest.fixture
def models_dir(tmp_path):
    """A models directory holding only the 'dense' tagger.

    Yields:
        Path: Directory the default model locations resolve against.
    """
    export_dense_tagger(tmp_path)
    yield tmp_path
