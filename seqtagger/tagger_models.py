"""Tagger architectures and their on-disk export format.

Every tagger consumes a ``[batch, sequence_length, EMBEDDING_DIM]`` tensor
of token embeddings and returns per-position label probabilities shaped
``[batch, sequence_length, num_labels]``. A tagger is served as a
TorchScript file (``model.pt``) with a ``tagger_metadata.json`` next to it:

    {"labels": ["__PAD__", "NOUN", ...], "sequenceLength": 20}

Training is done elsewhere; this module only defines the architectures and
writes artifacts the registry can load.

Example:
    >>> from seqtagger.tagger_models import build_tagger, export_tagger
    >>> tagger = build_tagger('dense', num_labels=3)
    >>> export_tagger(tagger, 'models/dense', ['NOUN', 'VERB', 'PAD'], 5)
"""

import json
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import torch
from torch import nn

from .config import DEFAULT_CONFIG, EMBEDDING_DIM

logger = logging.getLogger(__name__)

TAGGER_KINDS = ('bidirectional-lstm', 'lstm', 'weighted-lstm', 'dense')


class DenseTagger(nn.Module):
    """Position-wise feed-forward tagger; positions do not see each other."""

    def __init__(self, num_labels: int, hidden_dim: int = 128, embedding_dim: int = EMBEDDING_DIM):
        super().__init__()
        self.hidden = nn.Linear(embedding_dim, hidden_dim)
        self.output = nn.Linear(hidden_dim, num_labels)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        hidden = torch.relu(self.hidden(x))
        return torch.softmax(self.output(hidden), dim=-1)


class LstmTagger(nn.Module):
    """Recurrent tagger over the padded embedding sequence."""

    def __init__(
        self,
        num_labels: int,
        hidden_dim: int = 128,
        bidirectional: bool = False,
        embedding_dim: int = EMBEDDING_DIM,
    ):
        super().__init__()
        self.lstm = nn.LSTM(
            embedding_dim,
            hidden_dim,
            batch_first=True,
            bidirectional=bidirectional,
        )
        directions = 2 if bidirectional else 1
        self.output = nn.Linear(hidden_dim * directions, num_labels)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        states, _ = self.lstm(x)
        return torch.softmax(self.output(states), dim=-1)


def build_tagger(kind: str, num_labels: int, hidden_dim: int = 128) -> nn.Module:
    """Instantiate an (untrained) tagger architecture by name.

    The weighted LSTM differs from the plain LSTM only in the loss it was
    trained with, so both share an architecture.

    Raises:
        ValueError: If ``kind`` is unknown or ``num_labels`` is not positive.
    """
    if num_labels < 1:
        raise ValueError(f"num_labels must be positive, got {num_labels}")
    if kind == 'dense':
        return DenseTagger(num_labels, hidden_dim=hidden_dim)
    if kind == 'bidirectional-lstm':
        return LstmTagger(num_labels, hidden_dim=hidden_dim, bidirectional=True)
    if kind in ('lstm', 'weighted-lstm'):
        return LstmTagger(num_labels, hidden_dim=hidden_dim)
    raise ValueError(f"Unknown tagger kind '{kind}'. Expected one of: {', '.join(TAGGER_KINDS)}")


def export_tagger(
    module: nn.Module,
    output_dir: Union[str, Path],
    labels: Sequence[str],
    sequence_length: int,
    sentinel_label: Optional[str] = None,
) -> Path:
    """Script a tagger and write it with its metadata.

    Args:
        module: Tagger module whose output width equals ``len(labels)``.
        output_dir: Directory receiving ``model.pt`` and ``tagger_metadata.json``.
        labels: Output classes, index-aligned to the score vectors.
        sequence_length: Fixed input length the tagger expects.
        sentinel_label: Label displayed for padding; must be one of ``labels``.

    Returns:
        Path of the written model file.

    Raises:
        ValueError: If the metadata is inconsistent.
    """
    labels = list(labels)
    if sequence_length < 1:
        raise ValueError(f"sequence_length must be positive, got {sequence_length}")
    if sentinel_label is not None and sentinel_label not in labels:
        raise ValueError(f"sentinel_label '{sentinel_label}' is not one of the labels")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    model_path = output_dir / DEFAULT_CONFIG['model_filename']
    metadata_path = output_dir / DEFAULT_CONFIG['metadata_filename']

    module.eval()
    scripted = torch.jit.script(module)
    scripted.save(str(model_path))

    metadata = {'labels': labels, 'sequenceLength': sequence_length}
    if sentinel_label is not None:
        metadata['sentinelLabel'] = sentinel_label
    with open(metadata_path, 'w', encoding='utf-8') as f:
        json.dump(metadata, f, indent=2, ensure_ascii=False)

    logger.info(f"Tagger exported to {output_dir}")
    return model_path
