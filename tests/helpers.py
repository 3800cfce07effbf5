"""Fakes and artifact builders shared by the tests."""
import threading
import time
from pathlib import Path
from typing import List, Sequence

import torch

from seqtagger.config import EMBEDDING_DIM, MODEL_URLS
from seqtagger.tagger_models import build_tagger, export_tagger

LABELS = ['NOUN', 'VERB', 'PAD']
SEQUENCE_LENGTH = 5


class FakeEmbedder:
    """Embeds the i-th token as a vector filled with (i + 1) / 10."""

    def __init__(self):
        self.calls: List[List[str]] = []

    def embed(self, tokens: Sequence[str]) -> torch.Tensor:
        self.calls.append(list(tokens))
        if not tokens:
            return torch.empty((0, EMBEDDING_DIM))
        return torch.stack([
            torch.full((EMBEDDING_DIM,), (i + 1) / 10) for i in range(len(tokens))
        ])


class CountingFactory:
    """Zero-argument factory that counts calls and can be slow or failing."""

    def __init__(self, result=None, delay: float = 0.0, error: Exception = None):
        self.result = result if result is not None else FakeEmbedder()
        self.delay = delay
        self.error = error
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, *args):
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


def export_dense_tagger(
    models_dir: Path,
    labels: Sequence[str] = tuple(LABELS),
    sequence_length: int = SEQUENCE_LENGTH,
) -> Path:
    """Write an untrained dense tagger where the registry expects 'dense'."""
    output_dir = Path(models_dir) / Path(MODEL_URLS['dense']).parent
    tagger = build_tagger('dense', num_labels=len(labels))
    return export_tagger(tagger, output_dir, list(labels), sequence_length)
