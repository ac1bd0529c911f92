"""Decoding and normalization of individual ORCID records."""

from .decoder import DecodeError, decode_record
from .normalizer import (
    NormalizationError,
    collect_org_ids,
    deduplicate_affiliations,
    derive_name,
    extract_affiliations,
    normalize_record,
)
from .processor import (
    OrgIdTransformer,
    OutcomeStatus,
    ParallelTransformStage,
    RecordTransformer,
    TransformOutcome,
)
from .resolver import OrgMapError, OrgResolver, normalize_org_identifier

__all__ = [
    "DecodeError",
    "decode_record",
    "NormalizationError",
    "collect_org_ids",
    "deduplicate_affiliations",
    "derive_name",
    "extract_affiliations",
    "normalize_record",
    "OrgIdTransformer",
    "OutcomeStatus",
    "ParallelTransformStage",
    "RecordTransformer",
    "TransformOutcome",
    "OrgMapError",
    "OrgResolver",
    "normalize_org_identifier",
]
