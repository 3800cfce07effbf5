"""Text in, tagged tokens out.

A run tokenizes the text, makes sure the embedder, tagger and tagger
metadata are loaded, embeds the tokens, pads them into a single-example
batch, runs the tagger and decodes its scores. Tensors created along the
way live in a ``TensorScope`` and are dropped before the run returns or
raises; the caller only ever receives plain lists.

Example:
    >>> pipeline = TaggingPipeline(ModelRegistry(models_dir='path/to/models'))
    >>> result = asyncio.run(pipeline.run("What is the weather in Cambridge MA?", "dense"))
    >>> [(tag.token, tag.label, tag.percent) for tag in result.tags]
    [('What', 'PRON', '97.2%'), ...]
"""

import asyncio
import logging
import threading
import time
import traceback
from typing import Any, Dict, Iterable, List, Optional, Union

import torch
from tqdm import tqdm

from .batching import build_batch
from .config import EMBEDDING_DIM
from .exceptions import DataIntegrityError, PipelineCancelledError, UnavailableModelError
from .inference import decode, infer
from .registry import ModelRegistry, TaggerMetadata
from .results import TaggingResult, Unavailable
from .tokenizer import tokenize, truncate

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

WARMUP_TEXT = 'What is the weather in Cambridge MA?'

PipelineOutcome = Union[TaggingResult, Unavailable]
CancelEvent = Union[asyncio.Event, threading.Event]


class TensorScope:
    """Holds the tensors of one request and drops all of them on exit.

    On the error path the finished frames of the propagating traceback are
    cleared as well, so callees that received a tensor as an argument do not
    keep it alive through the exception.
    """

    def __init__(self):
        self._buffers: Dict[str, torch.Tensor] = {}

    def __setitem__(self, name: str, tensor: torch.Tensor) -> None:
        self._buffers[name] = tensor

    def __getitem__(self, name: str) -> torch.Tensor:
        return self._buffers[name]

    def __len__(self) -> int:
        return len(self._buffers)

    def __enter__(self) -> 'TensorScope':
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        logger.debug(f"Releasing {len(self._buffers)} request buffers")
        self._buffers.clear()
        if tb is not None:
            # Frames still executing are skipped
            traceback.clear_frames(tb)
        return False


class TaggingPipeline:
    """Tags text with one of the registry's taggers.

    Args:
        registry: Registry providing models; a new one is created from
            ``config`` if omitted.
        **config: Configuration overrides used when creating the registry.
    """

    def __init__(self, registry: Optional[ModelRegistry] = None, **config):
        self.registry = registry if registry is not None else ModelRegistry(**config)
        self.default_model = self.registry.config['default_model']

    @staticmethod
    def _check_cancelled(cancel_event: Optional[CancelEvent]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelledError("Pipeline run was cancelled")

    async def run(
        self,
        text: str,
        model_name: Optional[str] = None,
        cancel_event: Optional[CancelEvent] = None,
    ) -> PipelineOutcome:
        """Tag ``text`` with the named tagger.

        Args:
            text: Input text.
            model_name: Tagger name; defaults to the configured default model.
            cancel_event: ``asyncio.Event`` or ``threading.Event``; once set, the
                run stops at the next stage boundary.
                A running inference is never interrupted.

        Returns:
            A ``TaggingResult``, or ``Unavailable`` if the tagger could not be
            loaded. Empty input gives an empty result without loading models.

        Raises:
            ModelLoadError: If the embedder cannot be loaded.
            MetadataError: If the tagger metadata cannot be loaded.
            DataIntegrityError: If stages disagree on lengths or shapes.
            PipelineCancelledError: If ``cancel_event`` was set.
        """
        model_name = model_name or self.default_model
        tokens = tokenize(text)
        if not tokens:
            return TaggingResult.empty(model_name)
        self._check_cancelled(cancel_event)

        embedder, tagger, metadata = await asyncio.gather(
            self.registry.load_embedder(),
            self.registry.load_tagger(model_name),
            self.registry.load_metadata(model_name),
            return_exceptions=True,
        )
        if isinstance(embedder, BaseException):
            raise embedder
        if isinstance(tagger, BaseException):
            raise tagger
        if tagger is None:
            logger.warning(f"Model '{model_name}' is not available")
            return Unavailable(model_name)
        if isinstance(metadata, BaseException):
            raise metadata
        self._check_cancelled(cancel_event)

        tokens = truncate(tokens, metadata.sequence_length)
        return await self._execute(tokens, embedder, tagger, metadata, model_name, cancel_event)

    async def _execute(
        self,
        tokens: List[str],
        embedder: Any,
        tagger: Any,
        metadata: TaggerMetadata,
        model_name: str,
        cancel_event: Optional[CancelEvent],
    ) -> TaggingResult:
        with TensorScope() as buffers:
            started = time.perf_counter()
            buffers['activations'] = await asyncio.to_thread(embedder.embed, tokens)
            logger.debug(
                f"Embedding {len(tokens)} tokens took {time.perf_counter() - started:.3f}s"
            )
            if tuple(buffers['activations'].shape) != (len(tokens), EMBEDDING_DIM):
                raise DataIntegrityError(
                    f"Embedder returned shape {list(buffers['activations'].shape)} "
                    f"for {len(tokens)} tokens"
                )
            self._check_cancelled(cancel_event)

            buffers['batch'] = build_batch(buffers['activations'], metadata.sequence_length)
            self._check_cancelled(cancel_event)

            buffers['prediction'] = await asyncio.to_thread(
                infer, tagger, buffers['batch'], metadata.num_labels
            )
            self._check_cancelled(cancel_event)

            return decode(tokens, buffers['prediction'], buffers['batch'], metadata, model_name)

    async def tag(self, text: str, model_name: Optional[str] = None) -> TaggingResult:
        """Like ``run`` but raises ``UnavailableModelError`` for missing taggers."""
        outcome = await self.run(text, model_name)
        if isinstance(outcome, Unavailable):
            raise UnavailableModelError(outcome.model_name)
        return outcome

    async def run_many(
        self,
        texts: Iterable[str],
        model_name: Optional[str] = None,
        show_progress: bool = False,
    ) -> List[PipelineOutcome]:
        """Run the pipeline over several texts, one after another."""
        texts = list(texts)
        return [
            await self.run(text, model_name)
            for text in tqdm(texts, desc="Tagging", disable=not show_progress)
        ]

    async def warmup(self, model_name: Optional[str] = None) -> PipelineOutcome:
        """Load everything and tag a fixed sentence once."""
        await self.registry.load_all()
        return await self.run(WARMUP_TEXT, model_name)

    def __repr__(self) -> str:
        return f"TaggingPipeline(registry={self.registry!r}, default_model='{self.default_model}')"


async def run_pipeline(
    text: str,
    model_name: Optional[str] = None,
    registry: Optional[ModelRegistry] = None,
) -> PipelineOutcome:
    """Tag ``text`` with models from ``registry``.

    A fresh ``ModelRegistry`` over the default configuration is created when
    none is given; pass one in to reuse loaded models across calls.
    """
    return await TaggingPipeline(registry).run(text, model_name)
