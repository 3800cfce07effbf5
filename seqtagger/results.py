"""Value objects returned by the pipeline.

Everything here holds plain Python lists and floats; no tensors cross the
pipeline boundary.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np


@dataclass(frozen=True)
class TokenTag:
    """Decoded label for one token."""

    token: str
    label: str
    label_index: int
    confidence: float

    @property
    def display_label(self) -> str:
        """Label with the ``__`` markers of special labels removed."""
        return self.label.replace('__', '')

    @property
    def percent(self) -> str:
        """Confidence as a percentage with three significant digits.

        Trailing zeros are kept and small values are never written in
        exponent form: ``0.05`` gives ``5.00%``, ``1.0`` gives ``100%``.
        """
        digits = np.format_float_positional(
            self.confidence * 100, precision=3, unique=False, fractional=False, trim='k'
        )
        return f"{digits.rstrip('.')}%"


@dataclass
class TaggingResult:
    """Tokens, their score vectors and their embeddings, index-aligned.

    ``tokens`` may end with one synthetic sentinel token when the input was
    shorter than the tagger's sequence length.
    """

    tokens: List[str]
    scores: List[List[float]]
    embeddings: List[List[float]]
    labels: List[str] = field(default_factory=list)
    tags: List[TokenTag] = field(default_factory=list)
    model_name: Optional[str] = None

    def __len__(self) -> int:
        return len(self.tokens)

    @classmethod
    def empty(cls, model_name: Optional[str] = None) -> 'TaggingResult':
        return cls(tokens=[], scores=[], embeddings=[], model_name=model_name)

    def to_dict(self, include_embeddings: bool = True) -> Dict[str, Any]:
        result = {
            'model': self.model_name,
            'tokens': self.tokens,
            'tags': [
                {'token': tag.token, 'label': tag.label, 'score': tag.confidence}
                for tag in self.tags
            ],
            'scores': self.scores,
        }
        if include_embeddings:
            result['embeddings'] = self.embeddings
        return result


@dataclass(frozen=True)
class Unavailable:
    """Outcome for a tagger name that has no successfully loaded model."""

    model_name: str
