# file: seqtagger/exceptions.py
"""Exceptions shared across the tagging pipeline.

- ModelLoadError         : the embedder or a tagger could not be loaded
- MetadataError          : tagger metadata could not be fetched, parsed or validated
- DataIntegrityError     : token/score/embedding lengths or shapes disagree
- UnavailableModelError  : the requested tagger has no successfully loaded model
- PipelineCancelledError : the caller cancelled a run between stages
"""


class SeqTaggerError(RuntimeError):
    """Base class for every error raised by seqtagger."""


class ModelLoadError(SeqTaggerError):
    """A model (embedder or tagger) failed to load."""


class MetadataError(SeqTaggerError):
    """Tagger metadata is missing, unreadable or malformed."""


class DataIntegrityError(SeqTaggerError):
    """Token, score and embedding sequences are not aligned."""


class UnavailableModelError(SeqTaggerError):
    """The named tagger could not be loaded and is unavailable."""

    def __init__(self, model_name: str):
        self.model_name = model_name
        super().__init__(f"Model '{model_name}' is not available")


class PipelineCancelledError(SeqTaggerError):
    """A pipeline run was cancelled between two stages."""
