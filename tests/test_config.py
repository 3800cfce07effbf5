"""Tests for configuration helpers."""
import unittest
from pathlib import Path

import torch

from seqtagger.config import (
    DEFAULT_CONFIG,
    MODEL_URLS,
    merge_config,
    metadata_location,
    resolve_device,
    resolve_local_path,
    split_hub_location,
)


class TestLocations(unittest.TestCase):
    """Test model and metadata location handling."""

    def test_metadata_location_replaces_filename(self):
        self.assertEqual(
            metadata_location('models/dense/model.pt'),
            'models/dense/tagger_metadata.json'
        )

    def test_metadata_location_for_every_configured_model(self):
        for name, location in MODEL_URLS.items():
            with self.subTest(name=name):
                self.assertTrue(metadata_location(location).endswith('/tagger_metadata.json'))

    def test_metadata_location_for_bare_filename(self):
        self.assertEqual(metadata_location('model.pt'), 'tagger_metadata.json')

    def test_metadata_location_rejects_other_filenames(self):
        with self.assertRaises(ValueError):
            metadata_location('models/dense/weights.bin')

    def test_metadata_location_on_hub(self):
        self.assertEqual(
            metadata_location('hf://org/repo/dense/model.pt'),
            'hf://org/repo/dense/tagger_metadata.json'
        )

    def test_split_hub_location(self):
        self.assertEqual(
            split_hub_location('hf://org/repo/dense/model.pt'),
            ('org/repo', 'dense/model.pt')
        )
        self.assertIsNone(split_hub_location('models/dense/model.pt'))

    def test_split_hub_location_invalid(self):
        with self.assertRaises(ValueError):
            split_hub_location('hf://org/model.pt')

    def test_resolve_local_path(self):
        self.assertEqual(
            resolve_local_path('models/dense/model.pt', '/srv'),
            Path('/srv/models/dense/model.pt')
        )
        self.assertEqual(resolve_local_path('/abs/model.pt', '/srv'), Path('/abs/model.pt'))


class TestConfig(unittest.TestCase):
    """Test configuration merging and device selection."""

    def test_merge_config_overrides(self):
        config = merge_config(models_dir='/tmp/models')
        self.assertEqual(config['models_dir'], '/tmp/models')
        self.assertEqual(config['default_sentinel_index'], DEFAULT_CONFIG['default_sentinel_index'])

    def test_merge_config_does_not_mutate_defaults(self):
        merge_config(default_model='dense')
        self.assertEqual(DEFAULT_CONFIG['default_model'], 'bidirectional-lstm')

    def test_merge_config_rejects_unknown_keys(self):
        with self.assertRaises(ValueError) as context:
            merge_config(model_dir='typo')
        self.assertIn('model_dir', str(context.exception))

    def test_resolve_device_cpu(self):
        self.assertEqual(resolve_device('cpu'), torch.device('cpu'))
        self.assertEqual(resolve_device(-1), torch.device('cpu'))

    def test_resolve_device_gpu_index(self):
        self.assertEqual(resolve_device(1), torch.device('cuda', 1))

    def test_resolve_device_invalid(self):
        with self.assertRaises(ValueError):
            resolve_device('tpu')


if __name__ == '__main__':
    unittest.main()
