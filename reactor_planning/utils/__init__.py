"""Shared time, volume and hashing utilities."""

from .time_volume import (
    duration_for_volume,
    volume_for_duration,
    make_equal_split,
    max_fill_pieces,
    split_by_max,
    volume_fit_penalty,
    quantize_times,
    windows_overlap,
)
from .hashing import fnv1a32, stable_id, canonical_json, normalize_number

__all__ = [
    'duration_for_volume',
    'volume_for_duration',
    'make_equal_split',
    'max_fill_pieces',
    'split_by_max',
    'volume_fit_penalty',
    'quantize_times',
    'windows_overlap',
    'fnv1a32',
    'stable_id',
    'canonical_json',
    'normalize_number',
]
