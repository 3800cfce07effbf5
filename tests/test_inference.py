"""Tests for running taggers and decoding their scores."""
import unittest

import torch

from seqtagger.batching import build_batch
from seqtagger.config import EMBEDDING_DIM
from seqtagger.exceptions import DataIntegrityError
from seqtagger.inference import decode, infer
from seqtagger.registry import TaggerMetadata
from seqtagger.results import TokenTag

METADATA = TaggerMetadata(labels=('NOUN', 'VERB', 'PAD'), sequence_length=5, sentinel_index=2)


def _scores(rows):
    """Pad score rows to the sequence length and add a batch dimension."""
    rows = list(rows) + [[0.0, 0.0, 1.0]] * (METADATA.sequence_length - len(rows))
    return torch.tensor([rows])


class TestDecode(unittest.TestCase):
    """Test the decoding and padding-display policy."""

    def setUp(self):
        self.padded = build_batch(torch.rand(2, EMBEDDING_DIM), METADATA.sequence_length)

    def test_short_input_gets_one_sentinel_token(self):
        raw = _scores([[0.9, 0.05, 0.05], [0.2, 0.7, 0.1]])
        result = decode(['Cambridge', 'MA'], raw, self.padded, METADATA, model_name='dense')

        self.assertEqual(result.tokens, ['Cambridge', 'MA', 'PAD'])
        self.assertEqual(len(result.scores), 3)
        self.assertEqual(len(result.embeddings), 3)
        self.assertEqual(len(result), 3)
        self.assertEqual(result.model_name, 'dense')
        self.assertEqual([tag.label for tag in result.tags], ['NOUN', 'VERB', 'PAD'])

    def test_sentinel_embedding_is_padding_vector(self):
        raw = _scores([[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        result = decode(['Cambridge', 'MA'], raw, self.padded, METADATA)
        self.assertEqual(result.embeddings[2], [1.0] * EMBEDDING_DIM)
        self.assertEqual(len(result.embeddings[0]), EMBEDDING_DIM)

    def test_full_length_input_has_no_sentinel(self):
        tokens = ['a', 'b', 'c', 'd', 'e']
        padded = build_batch(torch.rand(5, EMBEDDING_DIM), 5)
        raw = _scores([[0.1, 0.8, 0.1]] * 5)
        result = decode(tokens, raw, padded, METADATA)
        self.assertEqual(result.tokens, tokens)
        self.assertEqual(len(result.scores), 5)

    def test_longer_input_is_cut_to_sequence_length(self):
        tokens = ['a', 'b', 'c', 'd', 'e', 'f', 'g']
        padded = build_batch(torch.rand(5, EMBEDDING_DIM), 5)
        result = decode(tokens, _scores([[0.1, 0.8, 0.1]] * 5), padded, METADATA)
        self.assertEqual(result.tokens, tokens[:5])

    def test_argmax_ties_choose_first_label(self):
        raw = _scores([[0.4, 0.4, 0.2], [0.25, 0.375, 0.375]])
        result = decode(['x', 'y'], raw, self.padded, METADATA)
        self.assertEqual(result.tags[0].label_index, 0)
        self.assertEqual(result.tags[1].label_index, 1)

    def test_confidence_is_raw_maximum(self):
        raw = _scores([[0.5, 0.25, 0.125], [0.0, 0.0, 0.0]])
        result = decode(['x', 'y'], raw, self.padded, METADATA)
        self.assertAlmostEqual(result.tags[0].confidence, 0.5)
        self.assertEqual(result.tags[1].label_index, 0)
        self.assertEqual(result.tags[1].confidence, 0.0)

    def test_outputs_are_plain_lists(self):
        raw = _scores([[0.9, 0.05, 0.05], [0.2, 0.7, 0.1]])
        result = decode(['x', 'y'], raw, self.padded, METADATA)
        self.assertIsInstance(result.scores, list)
        self.assertIsInstance(result.scores[0][0], float)
        self.assertIsInstance(result.embeddings[0][0], float)
        self.assertEqual(result.labels, ['NOUN', 'VERB', 'PAD'])

    def test_accepts_nested_lists(self):
        raw = [[[0.9, 0.05, 0.05]] * 5]
        padded = [[0.0] * 4] * 5
        result = decode(['x'], raw, padded, METADATA)
        self.assertEqual(result.tokens, ['x', 'PAD'])

    def test_custom_sentinel_label(self):
        metadata = TaggerMetadata(labels=('__PAD__', 'NOUN', 'VERB'), sequence_length=5, sentinel_index=0)
        result = decode(['x'], _scores([[0.0, 1.0, 0.0]]), self.padded, metadata)
        self.assertEqual(result.tokens, ['x', '__PAD__'])

    def test_too_few_score_vectors_raises(self):
        raw = torch.rand(1, 1, 3)
        with self.assertRaises(DataIntegrityError):
            decode(['Cambridge', 'MA'], raw, self.padded, METADATA)

    def test_too_few_embeddings_raises(self):
        with self.assertRaises(DataIntegrityError):
            decode(['Cambridge', 'MA'], _scores([]), torch.rand(1, EMBEDDING_DIM), METADATA)

    def test_score_width_mismatch_raises(self):
        with self.assertRaises(DataIntegrityError):
            decode(['x'], torch.rand(1, 5, 4), self.padded, METADATA)

    def test_missing_batch_dimension_raises(self):
        with self.assertRaises(DataIntegrityError):
            decode(['x'], torch.rand(5, 3), self.padded, METADATA)


class TestInfer(unittest.TestCase):
    """Test tagger invocation and output validation."""

    def setUp(self):
        self.batch = build_batch(torch.rand(2, EMBEDDING_DIM), 5)

    def test_infer_returns_scores(self):
        tagger = lambda batch: torch.softmax(batch[..., :3], dim=-1)  # noqa: E731
        prediction = infer(tagger, self.batch, num_labels=3)
        self.assertEqual(tuple(prediction.shape), (1, 5, 3))

    def test_infer_rejects_wrong_sequence_length(self):
        tagger = lambda batch: torch.rand(1, 4, 3)  # noqa: E731
        with self.assertRaises(DataIntegrityError):
            infer(tagger, self.batch)

    def test_infer_rejects_wrong_label_count(self):
        tagger = lambda batch: torch.rand(1, 5, 4)  # noqa: E731
        with self.assertRaises(DataIntegrityError):
            infer(tagger, self.batch, num_labels=3)

    def test_infer_rejects_non_tensor_output(self):
        tagger = lambda batch: [[0.1, 0.9]]  # noqa: E731
        with self.assertRaises(DataIntegrityError):
            infer(tagger, self.batch)


class TestTokenTag(unittest.TestCase):
    """Test display helpers."""

    def test_percent(self):
        self.assertEqual(TokenTag('x', 'NOUN', 0, 0.97234).percent, '97.2%')
        self.assertEqual(TokenTag('x', 'NOUN', 0, 1.0).percent, '100%')

    def test_percent_keeps_trailing_zeros(self):
        self.assertEqual(TokenTag('x', 'NOUN', 0, 0.05).percent, '5.00%')
        self.assertEqual(TokenTag('x', 'NOUN', 0, 0.0005).percent, '0.0500%')

    def test_percent_small_confidence_is_positional(self):
        self.assertEqual(TokenTag('x', 'NOUN', 0, 1e-7).percent, '0.0000100%')

    def test_display_label(self):
        self.assertEqual(TokenTag('x', '__PAD__', 2, 0.5).display_label, 'PAD')


if __name__ == '__main__':
    unittest.main()
