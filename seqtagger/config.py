"""Configuration for the tagging pipeline.

``MODEL_URLS`` maps each short tagger name to the location of its
TorchScript file. Relative locations resolve against ``models_dir``;
locations of the form ``hf://<org>/<repo>/<path>`` are downloaded from the
Hugging Face Hub. The tagger metadata always sits next to the model file.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import torch

EMBEDDING_DIM = 512

HF_SCHEME = 'hf://'

# Tagger name -> model location
MODEL_URLS = {
    'bidirectional-lstm': 'models/bidirectional-tagger/model.pt',
    'lstm': 'models/lstm-tagger/model.pt',
    'weighted-lstm': 'models/weighted-tagger/model.pt',
    'dense': 'models/dense/model.pt',
}

DEFAULT_CONFIG = {
    # Sentence/word encoder; must produce EMBEDDING_DIM wide vectors
    'embedder_model_id': 'google/bert_uncased_L-4_H-512_A-8',
    'embed_batch_size': 64,
    'max_embed_length': 32,

    # Tagger artifacts
    'models_dir': os.environ.get('SEQTAGGER_MODELS_DIR', '.'),
    'model_filename': 'model.pt',
    'metadata_filename': 'tagger_metadata.json',
    'default_model': 'bidirectional-lstm',

    # Label shown for the synthetic trailing token when metadata names none
    'default_sentinel_index': 2,

    'device': 'auto',
}


def metadata_location(
    model_location: str,
    model_filename: str = DEFAULT_CONFIG['model_filename'],
    metadata_filename: str = DEFAULT_CONFIG['metadata_filename'],
) -> str:
    """Return the metadata location that sits beside a model location.

    Example:
        >>> metadata_location('models/dense/model.pt')
        'models/dense/tagger_metadata.json'
    """
    base, _, filename = model_location.rpartition('/')
    if filename != model_filename:
        raise ValueError(
            f"Model location '{model_location}' does not end with '{model_filename}'"
        )
    return f"{base}/{metadata_filename}" if base else metadata_filename


def split_hub_location(location: str) -> Optional[Tuple[str, str]]:
    """Split ``hf://org/repo/path`` into ``(repo_id, filename)``.

    Returns None for locations that are not on the hub.
    """
    if not location.startswith(HF_SCHEME):
        return None
    parts = location[len(HF_SCHEME):].split('/', 2)
    if len(parts) < 3 or not all(parts):
        raise ValueError(
            f"Invalid hub location: {location}. Expected 'hf://<org>/<repo>/<path>'."
        )
    org, repo, filename = parts
    return f"{org}/{repo}", filename


def resolve_local_path(location: str, models_dir: Union[str, os.PathLike]) -> Path:
    """Resolve a local location against the models directory."""
    path = Path(location)
    if not path.is_absolute():
        path = Path(models_dir) / path
    return path


def resolve_device(device: Union[int, str] = 'auto') -> torch.device:
    """Turn a device specification into a ``torch.device``.

    Args:
        device: 'auto', 'cpu', 'cuda', 'cuda:N', -1 (CPU) or a GPU index.

    Raises:
        ValueError: If the specification is not understood.
    """
    if device == 'auto':
        return torch.device('cuda' if torch.cuda.is_available() else 'cpu')
    if device in ('cpu', -1):
        return torch.device('cpu')
    if isinstance(device, str) and device.startswith('cuda'):
        return torch.device(device)
    try:
        return torch.device('cuda', int(device))
    except (ValueError, TypeError) as e:
        raise ValueError(
            f"Invalid device specification: {device}. "
            "Expected 'auto', 'cpu', 'cuda', 'cuda:0', or an integer."
        ) from e


def merge_config(**overrides: Any) -> Dict[str, Any]:
    """Merge keyword overrides into a copy of ``DEFAULT_CONFIG``.

    Unknown keys are rejected so that typos do not silently fall back to
    defaults.
    """
    unknown = set(overrides) - set(DEFAULT_CONFIG)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
    return {**DEFAULT_CONFIG, **overrides}
