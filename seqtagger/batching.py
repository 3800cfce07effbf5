"""Fixed-length, single-example batches for the taggers.

Taggers were trained on exactly ``sequence_length`` positions, so shorter
inputs are padded at the end with ``PADDING_VECTOR``. The padding vector is
shared by every pad slot of every batch and is never written to.
"""

import torch

from .config import EMBEDDING_DIM
from .exceptions import DataIntegrityError

PADDING_VECTOR = torch.ones(EMBEDDING_DIM)


def padding_count(num_tokens: int, sequence_length: int) -> int:
    """Number of pad slots needed to reach ``sequence_length``."""
    return max(sequence_length - num_tokens, 0)


def pad_sequence(embeddings: torch.Tensor, sequence_length: int) -> torch.Tensor:
    """Append copies of ``PADDING_VECTOR`` up to ``sequence_length`` rows.

    Args:
        embeddings: ``[k, EMBEDDING_DIM]`` token embeddings, ``k <= sequence_length``.
        sequence_length: Target number of positions.

    Returns:
        ``[sequence_length, EMBEDDING_DIM]`` tensor. When ``k`` already equals
        ``sequence_length`` the input tensor itself is returned.

    Raises:
        DataIntegrityError: If the embeddings have the wrong width or more
            rows than ``sequence_length``.
    """
    if embeddings.dim() != 2 or embeddings.shape[1] != EMBEDDING_DIM:
        raise DataIntegrityError(
            f"Expected embeddings of shape [k, {EMBEDDING_DIM}], got {list(embeddings.shape)}"
        )
    num_tokens = embeddings.shape[0]
    if num_tokens > sequence_length:
        raise DataIntegrityError(
            f"Got {num_tokens} embeddings for a sequence length of {sequence_length}; "
            "tokens must be truncated before embedding"
        )

    to_pad = padding_count(num_tokens, sequence_length)
    if to_pad == 0:
        return embeddings
    # expand() is a view: every pad slot refers to the same storage
    padding = PADDING_VECTOR.to(embeddings.dtype).expand(to_pad, EMBEDDING_DIM)
    return torch.cat([embeddings, padding], dim=0)


def build_batch(embeddings: torch.Tensor, sequence_length: int) -> torch.Tensor:
    """Pad the embeddings and add a batch dimension of 1.

    Returns:
        Tensor of shape ``[1, sequence_length, EMBEDDING_DIM]``.
    """
    return pad_sequence(embeddings, sequence_length).unsqueeze(0)
