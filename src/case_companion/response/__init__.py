"""Structured extraction from free-form completion text."""

from .json_array import StageCostDraft, locate_array, parse_stage_array
from .sections import (
    HeaderBlockParser,
    HeaderSpec,
    HeaderTemplate,
    coerce_percentage,
    parse_header_block,
    split_list_items,
)
from .types import (
    CaseStageCost,
    FieldSet,
    FieldValue,
    HeaderBlock,
    ListSections,
    ValidatedArray,
)

__all__ = [
    "CaseStageCost",
    "FieldSet",
    "FieldValue",
    "HeaderBlock",
    "HeaderBlockParser",
    "HeaderSpec",
    "HeaderTemplate",
    "ListSections",
    "StageCostDraft",
    "ValidatedArray",
    "coerce_percentage",
    "locate_array",
    "parse_header_block",
    "parse_stage_array",
    "split_list_items",
]
