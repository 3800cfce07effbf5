"""Lazy, load-once registry for the embedder and the named taggers.

One registry is created per process and handed to the pipeline. Each
resource is loaded at most once: concurrent callers asking for the same
resource await the same in-flight task, so a slow download is never
started twice.

Failure handling differs per resource:

- Embedder: the error is raised to every waiter as ``ModelLoadError``. The
  failed attempt is forgotten, so a later explicit call may load it again.
  Until then ``embedder_status()`` reports ``UNAVAILABLE``.
- Tagger: the error is logged and the name is cached as unavailable
  (``None``) for the lifetime of the registry. It is never re-attempted.
- Metadata: the error is raised to the caller as ``MetadataError`` and
  cached, so later calls re-raise it without fetching again.

Names missing from ``model_urls`` are answered without creating a cache
entry, so the caches never grow past the configured models.

Example:
    >>> registry = ModelRegistry(models_dir='path/to/models')
    >>> statuses = asyncio.run(registry.load_all())
    >>> statuses['dense']
    <ModelStatus.LOADED: 'loaded'>
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import torch
from huggingface_hub import hf_hub_download

from .config import (
    MODEL_URLS,
    merge_config,
    metadata_location,
    resolve_local_path,
    split_hub_location,
)
from .embedder import Embedder, TransformerEmbedder
from .exceptions import MetadataError, ModelLoadError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class ModelStatus(str, Enum):
    """Load state of a named resource, for a UI to poll."""

    NOT_LOADED = 'not_loaded'
    PENDING = 'pending'
    LOADED = 'loaded'
    UNAVAILABLE = 'unavailable'


@dataclass(frozen=True)
class TaggerMetadata:
    """Label set and fixed input length a tagger was trained with.

    Attributes:
        labels: Output classes, index-aligned to the tagger's score vectors.
        sequence_length: Number of positions the tagger accepts.
        sentinel_index: Index of the label shown for padding positions.
    """

    labels: Tuple[str, ...]
    sequence_length: int
    sentinel_index: int

    @property
    def num_labels(self) -> int:
        return len(self.labels)

    @property
    def sentinel_label(self) -> str:
        return self.labels[self.sentinel_index]

    @classmethod
    def from_dict(cls, data: Any, default_sentinel_index: int = 2) -> 'TaggerMetadata':
        """Validate a parsed ``tagger_metadata.json`` document.

        The sentinel is taken from ``sentinelLabel`` if present, then from
        ``sentinelIndex``, and falls back to ``default_sentinel_index``.

        Raises:
            MetadataError: If a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise MetadataError(f"Metadata must be an object, got {type(data).__name__}")

        labels = data.get('labels')
        if (
            not isinstance(labels, list)
            or not labels
            or not all(isinstance(label, str) for label in labels)
        ):
            raise MetadataError("Metadata field 'labels' must be a non-empty list of strings")

        sequence_length = data.get('sequenceLength')
        if isinstance(sequence_length, bool) or not isinstance(sequence_length, int) or sequence_length < 1:
            raise MetadataError("Metadata field 'sequenceLength' must be a positive integer")

        if 'sentinelLabel' in data:
            if data['sentinelLabel'] not in labels:
                raise MetadataError(f"Sentinel label '{data['sentinelLabel']}' is not one of the labels")
            sentinel_index = labels.index(data['sentinelLabel'])
        else:
            sentinel_index = data.get('sentinelIndex', default_sentinel_index)
            if isinstance(sentinel_index, bool) or not isinstance(sentinel_index, int):
                raise MetadataError("Metadata field 'sentinelIndex' must be an integer")
            if not 0 <= sentinel_index < len(labels):
                raise MetadataError(
                    f"Sentinel index {sentinel_index} is out of range for {len(labels)} labels"
                )

        return cls(tuple(labels), sequence_length, sentinel_index)


def load_torchscript_tagger(path: Path) -> torch.jit.ScriptModule:
    """Load a TorchScript tagger onto the CPU in eval mode."""
    tagger = torch.jit.load(str(path), map_location='cpu')
    tagger.eval()
    return tagger


def read_metadata_file(path: Path) -> Any:
    """Read and parse a JSON metadata file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


class ModelRegistry:
    """Loads and caches the embedder, taggers and tagger metadata by name.

    Args:
        model_urls: Tagger name -> model location. Defaults to ``MODEL_URLS``.
        embedder_factory: Zero-argument callable building the embedder.
            Defaults to a ``TransformerEmbedder`` built from the configuration.
        tagger_loader: Callable loading a tagger from a local path.
        metadata_reader: Callable parsing the metadata file at a local path.
        **config: Overrides for ``DEFAULT_CONFIG``.
    """

    def __init__(
        self,
        model_urls: Optional[Mapping[str, str]] = None,
        embedder_factory: Optional[Callable[[], Embedder]] = None,
        tagger_loader: Optional[Callable[[Path], Any]] = None,
        metadata_reader: Optional[Callable[[Path], Any]] = None,
        **config
    ):
        self.config = merge_config(**config)
        self.model_urls = dict(MODEL_URLS if model_urls is None else model_urls)
        self._embedder_factory = embedder_factory or self._build_default_embedder
        self._tagger_loader = tagger_loader or load_torchscript_tagger
        self._metadata_reader = metadata_reader or read_metadata_file

        self._embedder_task: Optional[asyncio.Task] = None
        self._embedder_failed = False
        self._tagger_tasks: Dict[str, asyncio.Task] = {}
        self._metadata_tasks: Dict[str, asyncio.Task] = {}

    def _build_default_embedder(self) -> Embedder:
        return TransformerEmbedder(
            model_id=self.config['embedder_model_id'],
            device=self.config['device'],
            batch_size=self.config['embed_batch_size'],
            max_length=self.config['max_embed_length'],
        )

    def _resolve(self, location: str) -> Path:
        """Turn a configured location into a local file path.

        Raises:
            FileNotFoundError: If a local location does not exist.
        """
        hub_location = split_hub_location(location)
        if hub_location is not None:
            repo_id, filename = hub_location
            return Path(hf_hub_download(repo_id=repo_id, filename=filename))

        path = resolve_local_path(location, self.config['models_dir'])
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return path

    # Embedder

    async def load_embedder(self) -> Embedder:
        """Return the embedder, loading it on first use.

        Raises:
            ModelLoadError: If the embedder cannot be loaded.
        """
        if self._embedder_task is None:
            self._embedder_failed = False
            self._embedder_task = asyncio.ensure_future(self._load_embedder())
        task = self._embedder_task
        try:
            return await asyncio.shield(task)
        except ModelLoadError:
            if self._embedder_task is task:
                self._embedder_task = None
                self._embedder_failed = True
            raise

    async def _load_embedder(self) -> Embedder:
        try:
            return await asyncio.to_thread(self._embedder_factory)
        except ModelLoadError:
            raise
        except Exception as e:
            error_msg = f"Failed to load embedder: {str(e)}"
            logger.error(error_msg, exc_info=True)
            raise ModelLoadError(error_msg) from e

    # Taggers

    async def load_tagger(self, name: str) -> Optional[Any]:
        """Return the named tagger, or None if it is unavailable.

        Only configured names are cached; unknown names are answered
        directly.
        """
        if name not in self.model_urls:
            logger.warning(f"No location configured for model '{name}'")
            return None
        task = self._tagger_tasks.get(name)
        if task is None:
            task = asyncio.ensure_future(self._load_tagger(name))
            self._tagger_tasks[name] = task
        return await asyncio.shield(task)

    async def _load_tagger(self, name: str) -> Optional[Any]:
        location = self.model_urls[name]
        try:
            path = await asyncio.to_thread(self._resolve, location)
            tagger = await asyncio.to_thread(self._tagger_loader, path)
        except Exception as e:
            # Not every tagger kind has necessarily been trained and published
            logger.warning(f"Could not load '{name}' model from {location}: {str(e)}")
            return None
        logger.info(f"Successfully loaded model '{name}' from {location}")
        return tagger

    # Metadata

    async def load_metadata(self, name: str) -> TaggerMetadata:
        """Return the metadata stored beside the named tagger.

        Raises:
            MetadataError: If it cannot be located, read or validated.
        """
        if name not in self.model_urls:
            raise MetadataError(f"No location configured for model '{name}'")
        task = self._metadata_tasks.get(name)
        if task is None:
            task = asyncio.ensure_future(self._load_metadata(name))
            self._metadata_tasks[name] = task
        return await asyncio.shield(task)

    async def _load_metadata(self, name: str) -> TaggerMetadata:
        location = self.model_urls[name]
        try:
            location = metadata_location(
                location,
                model_filename=self.config['model_filename'],
                metadata_filename=self.config['metadata_filename'],
            )
            path = await asyncio.to_thread(self._resolve, location)
            data = await asyncio.to_thread(self._metadata_reader, path)
        except Exception as e:
            error_msg = f"Failed to load metadata for model '{name}': {str(e)}"
            # Expected for tagger kinds that were never trained
            logger.warning(error_msg)
            raise MetadataError(error_msg) from e
        return TaggerMetadata.from_dict(
            data, default_sentinel_index=self.config['default_sentinel_index']
        )

    # Bulk loading and status

    async def load_all(self) -> Dict[str, ModelStatus]:
        """Load the embedder and every configured tagger concurrently.

        Waits for every load to settle. Tagger failures are tolerated.

        Returns:
            Tagger name -> status.

        Raises:
            ModelLoadError: If the embedder cannot be loaded.
        """
        names = list(self.model_urls)
        results = await asyncio.gather(
            self.load_embedder(),
            *(self.load_tagger(name) for name in names),
            return_exceptions=True,
        )
        if isinstance(results[0], BaseException):
            raise results[0]
        return {name: self.status(name) for name in names}

    @staticmethod
    def _task_status(task: Optional[asyncio.Task]) -> ModelStatus:
        if task is None or task.cancelled():
            return ModelStatus.NOT_LOADED
        if not task.done():
            return ModelStatus.PENDING
        if task.exception() is not None or task.result() is None:
            return ModelStatus.UNAVAILABLE
        return ModelStatus.LOADED

    def status(self, name: str) -> ModelStatus:
        """Load state of the named tagger; unknown names are unavailable."""
        if name not in self.model_urls:
            return ModelStatus.UNAVAILABLE
        return self._task_status(self._tagger_tasks.get(name))

    def embedder_status(self) -> ModelStatus:
        """Load state of the embedder, UNAVAILABLE after a failed attempt."""
        if self._embedder_task is None and self._embedder_failed:
            return ModelStatus.UNAVAILABLE
        return self._task_status(self._embedder_task)

    def available_models(self) -> List[str]:
        """Names of the taggers that loaded successfully."""
        return [name for name in self.model_urls if self.status(name) is ModelStatus.LOADED]

    def __repr__(self) -> str:
        return f"ModelRegistry(models={list(self.model_urls)}, models_dir='{self.config['models_dir']}')"
