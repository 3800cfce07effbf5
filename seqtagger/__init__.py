# file: seqtagger/__init__.py

"""
SeqTagger: per-token tagging over pretrained sentence embeddings.

Free text is split into tokens, each token is embedded with a pretrained
encoder, the embeddings are padded to the tagger's fixed sequence length
and one of several interchangeable tagger models labels every position.

Main components:

1. TaggingPipeline: tokenize -> embed -> batch -> infer -> decode
   Usage: `from seqtagger import TaggingPipeline`
2. ModelRegistry: load-once cache for the embedder, taggers and metadata
   Usage: `from seqtagger import ModelRegistry`
3. tokenize: the word-boundary tokenizer the taggers were trained with
"""

__version__ = "0.1.0"

from .batching import PADDING_VECTOR, build_batch  # noqa: F401
from .config import DEFAULT_CONFIG, EMBEDDING_DIM, MODEL_URLS  # noqa: F401
from .exceptions import (  # noqa: F401
    DataIntegrityError,
    MetadataError,
    ModelLoadError,
    PipelineCancelledError,
    SeqTaggerError,
    UnavailableModelError,
)
from .inference import decode, infer  # noqa: F401
from .pipeline import TaggingPipeline, run_pipeline  # noqa: F401
from .registry import ModelRegistry, ModelStatus, TaggerMetadata  # noqa: F401
from .results import TaggingResult, TokenTag, Unavailable  # noqa: F401
from .tokenizer import tokenize  # noqa: F401

__all__ = [
    'TaggingPipeline',
    'run_pipeline',
    'ModelRegistry',
    'ModelStatus',
    'TaggerMetadata',
    'TaggingResult',
    'TokenTag',
    'Unavailable',
    'tokenize',
    'build_batch',
    'infer',
    'decode',
    'PADDING_VECTOR',
    'EMBEDDING_DIM',
    'MODEL_URLS',
    'DEFAULT_CONFIG',
    'SeqTaggerError',
    'ModelLoadError',
    'MetadataError',
    'DataIntegrityError',
    'UnavailableModelError',
    'PipelineCancelledError',
]
