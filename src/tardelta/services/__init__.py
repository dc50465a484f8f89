"""Services package."""

from .delta_decoder import apply_delta, read_manifest
from .delta_encoder import encode_delta
from .delta_service import DeltaService
from .diff_service import compute_diff
from .index_service import build_index, compute_digest
from .utils import ApplyReport, Fingerprint, Index

__all__ = [
    "ApplyReport",
    "DeltaService",
    "Fingerprint",
    "Index",
    "apply_delta",
    "build_index",
    "compute_diff",
    "compute_digest",
    "encode_delta",
    "read_manifest",
]
