"""Token embeddings from a pretrained transformer encoder.

The embedder is treated as a black box by the rest of the package: it takes
an ordered list of tokens and returns one ``EMBEDDING_DIM`` wide vector per
token, in the same order. Each token is encoded on its own and the final
hidden states are mean-pooled over the attention mask.

Example:
    >>> from seqtagger.embedder import TransformerEmbedder
    >>> embedder = TransformerEmbedder()
    >>> embedder.embed(["Cambridge", "MA"]).shape
    torch.Size([2, 512])
"""

import logging
import warnings
from typing import Optional, Protocol, Sequence, Union

import torch
from transformers import AutoModel, AutoTokenizer
from transformers.utils import logging as hf_logging

from .config import DEFAULT_CONFIG, EMBEDDING_DIM, resolve_device
from .exceptions import ModelLoadError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Suppress some unnecessary warnings
warnings.filterwarnings("ignore", category=FutureWarning)
hf_logging.set_verbosity_error()


class Embedder(Protocol):
    """Anything that maps tokens to a ``[len(tokens), EMBEDDING_DIM]`` tensor."""

    def embed(self, tokens: Sequence[str]) -> torch.Tensor: ...


class TransformerEmbedder:
    """Mean-pooled token embeddings from a Hugging Face encoder.

    Args:
        model_id: Hugging Face model ID or local path. Defaults to
            ``DEFAULT_CONFIG['embedder_model_id']``.
        device: 'auto', 'cpu', 'cuda', 'cuda:N' or a GPU index.
        batch_size: Number of tokens encoded per forward pass.
        max_length: Maximum number of subword pieces per token.

    Raises:
        ModelLoadError: If the model cannot be loaded or its hidden size is
            not ``EMBEDDING_DIM``.
    """

    def __init__(
        self,
        model_id: Optional[str] = None,
        device: Union[int, str] = DEFAULT_CONFIG['device'],
        batch_size: int = DEFAULT_CONFIG['embed_batch_size'],
        max_length: int = DEFAULT_CONFIG['max_embed_length'],
    ):
        self.model_id = model_id or DEFAULT_CONFIG['embedder_model_id']
        self.batch_size = batch_size
        self.max_length = max_length
        self.device = resolve_device(device)

        try:
            logger.info(f"Loading embedder: {self.model_id}")
            self.tokenizer = AutoTokenizer.from_pretrained(self.model_id, use_fast=True)
            self.model = AutoModel.from_pretrained(self.model_id)
        except Exception as e:
            error_msg = f"Failed to load embedder '{self.model_id}': {str(e)}"
            logger.error(error_msg, exc_info=True)
            raise ModelLoadError(error_msg) from e

        hidden_size = getattr(self.model.config, 'hidden_size', None)
        if hidden_size != EMBEDDING_DIM:
            raise ModelLoadError(
                f"Embedder '{self.model_id}' produces {hidden_size}-dimensional vectors, "
                f"expected {EMBEDDING_DIM}"
            )

        self.model.to(self.device)
        self.model.eval()
        logger.info(f"Successfully loaded embedder: {self.model_id} on {self.device}")

    def embed(self, tokens: Sequence[str]) -> torch.Tensor:
        """Embed each token independently.

        Args:
            tokens: Ordered tokens.

        Returns:
            CPU tensor of shape ``[len(tokens), EMBEDDING_DIM]``, row ``i``
            belonging to ``tokens[i]``.
        """
        if not tokens:
            return torch.empty((0, EMBEDDING_DIM))

        chunks = []
        with torch.inference_mode():
            for start in range(0, len(tokens), self.batch_size):
                batch = list(tokens[start:start + self.batch_size])
                encoded = self.tokenizer(
                    batch,
                    padding=True,
                    truncation=True,
                    max_length=self.max_length,
                    return_tensors='pt',
                ).to(self.device)
                hidden = self.model(**encoded).last_hidden_state
                mask = encoded['attention_mask'].unsqueeze(-1).to(hidden.dtype)
                pooled = (hidden * mask).sum(dim=1) / mask.sum(dim=1).clamp(min=1e-9)
                chunks.append(pooled.cpu())
                del encoded, hidden, mask, pooled
        return torch.cat(chunks, dim=0)

    def __repr__(self) -> str:
        return f"TransformerEmbedder(model_id='{self.model_id}', device='{self.device}')"
