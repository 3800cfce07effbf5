"""Running a tagger on a batch and decoding its scores.

Decoding reconciles the padded batch with the original tokens. When the
input was shorter than the tagger's sequence length, one synthetic token
(the metadata's sentinel label) is appended so the first padding position
is shown too; scores and embeddings are cut to the same length.

Example:
    >>> prediction = infer(tagger, batch, metadata.num_labels)
    >>> result = decode(["Cambridge", "MA"], prediction, batch, metadata)
    >>> result.tokens
    ['Cambridge', 'MA', 'PAD']
"""

from typing import Any, Optional, Sequence

import numpy as np
import torch

from .exceptions import DataIntegrityError
from .registry import TaggerMetadata
from .results import TaggingResult, TokenTag


def _to_numpy(values: Any) -> np.ndarray:
    if isinstance(values, torch.Tensor):
        return values.detach().cpu().numpy()
    return np.asarray(values, dtype=np.float64)


def infer(tagger: Any, batch: torch.Tensor, num_labels: Optional[int] = None) -> torch.Tensor:
    """Run the tagger on a ``[1, sequence_length, EMBEDDING_DIM]`` batch.

    Args:
        tagger: Callable model.
        batch: Padded single-example batch.
        num_labels: Expected score width, if known.

    Returns:
        Score tensor of shape ``[1, sequence_length, num_labels]``.

    Raises:
        DataIntegrityError: If the tagger output has an unexpected shape.
    """
    with torch.inference_mode():
        prediction = tagger(batch)

    if not isinstance(prediction, torch.Tensor) or prediction.dim() != 3:
        raise DataIntegrityError("Tagger must return a [1, sequence_length, num_labels] tensor")
    if tuple(prediction.shape[:2]) != tuple(batch.shape[:2]):
        raise DataIntegrityError(
            f"Tagger returned shape {list(prediction.shape)} for a batch of shape {list(batch.shape)}"
        )
    if num_labels is not None and prediction.shape[2] != num_labels:
        raise DataIntegrityError(
            f"Tagger returned {prediction.shape[2]} scores per token, metadata has {num_labels} labels"
        )
    return prediction


def decode(
    tokens: Sequence[str],
    raw_scores: Any,
    embeddings: Any,
    metadata: TaggerMetadata,
    model_name: Optional[str] = None,
) -> TaggingResult:
    """Turn raw tagger scores into a ``TaggingResult``.

    Args:
        tokens: Tokens before padding.
        raw_scores: ``[1, sequence_length, num_labels]`` scores.
        embeddings: Padded embeddings, ``[sequence_length, dim]`` or with a
            leading batch dimension of 1.
        metadata: Metadata of the tagger that produced the scores.
        model_name: Name recorded on the result.

    Returns:
        Result whose tokens, scores and embeddings have equal length. The
        label of each position is its first highest-scoring label.

    Raises:
        DataIntegrityError: If the scores or embeddings do not cover the
            retained tokens, or the score width disagrees with the labels.
    """
    sequence_length = metadata.sequence_length

    scores = _to_numpy(raw_scores)
    if scores.ndim != 3 or scores.shape[0] != 1:
        raise DataIntegrityError(f"Expected scores of shape [1, L, n], got {list(scores.shape)}")
    scores = scores[0]

    vectors = _to_numpy(embeddings)
    if vectors.ndim == 3 and vectors.shape[0] == 1:
        vectors = vectors[0]
    if vectors.ndim != 2:
        raise DataIntegrityError(f"Expected embeddings of shape [L, dim], got {list(vectors.shape)}")

    retained = list(tokens[:sequence_length])
    if len(tokens) < sequence_length:
        retained.append(metadata.sentinel_label)
    length = len(retained)

    scores = scores[:length]
    vectors = vectors[:length]
    if len(scores) != length or len(vectors) != length:
        raise DataIntegrityError(
            f"Cannot align {length} tokens with {len(scores)} score vectors "
            f"and {len(vectors)} embeddings"
        )
    if scores.shape[1] != metadata.num_labels:
        raise DataIntegrityError(
            f"Score vectors have {scores.shape[1]} entries, metadata has {metadata.num_labels} labels"
        )

    # np.argmax returns the first index among equal maxima
    label_indices = np.argmax(scores, axis=1)
    confidences = scores[np.arange(length), label_indices]
    tags = [
        TokenTag(
            token=token,
            label=metadata.labels[int(index)],
            label_index=int(index),
            confidence=float(confidence),
        )
        for token, index, confidence in zip(retained, label_indices, confidences)
    ]

    return TaggingResult(
        tokens=retained,
        scores=scores.tolist(),
        embeddings=vectors.tolist(),
        labels=list(metadata.labels),
        tags=tags,
        model_name=model_name,
    )
