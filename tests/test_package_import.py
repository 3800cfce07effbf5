"""Tests for the public package interface."""
import seqtagger


def test_version():
    assert seqtagger.__version__ == "0.1.0"


def test_public_names_are_importable():
    for name in seqtagger.__all__:
        assert hasattr(seqtagger, name), name


def test_main_components():
    from seqtagger import ModelRegistry, TaggingPipeline, tokenize

    assert tokenize("moi school jai") == ["moi", "school", "jai"]
    assert TaggingPipeline(ModelRegistry()).default_model == "bidirectional-lstm"


def test_error_hierarchy():
    for error in (
        seqtagger.ModelLoadError,
        seqtagger.MetadataError,
        seqtagger.DataIntegrityError,
        seqtagger.UnavailableModelError,
        seqtagger.PipelineCancelledError,
    ):
        assert issubclass(error, seqtagger.SeqTaggerError)
    assert issubclass(seqtagger.SeqTaggerError, RuntimeError)
