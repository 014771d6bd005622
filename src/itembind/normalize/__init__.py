"""Record normalization module.

Exports the ``RecordNormalizer``, the microdata extractor, and the
form-data type used for flat key/value input.
"""
from __future__ import annotations

from itembind.normalize.forms import FormData, set_path, split_path
from itembind.normalize.microdata import VALUE_ATTRIBUTES, MicrodataExtractor
from itembind.normalize.normalizer import Record, RecordNormalizer, normalize

__all__ = [
    "RecordNormalizer",
    "Record",
    "normalize",
    "MicrodataExtractor",
    "VALUE_ATTRIBUTES",
    "FormData",
    "set_path",
    "split_path",
]
