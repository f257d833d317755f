"""DOCTYPE catalog, classification and declaration-family conversion."""

from x3d_validator.doctype.catalog import CATALOG, DeclarationEntry
from x3d_validator.doctype.checker import (
    DoctypeChecker,
    DoctypeOutcome,
    DoctypeUsageError,
    RewriteResult,
    rewrite_declaration,
)

__all__ = [
    "CATALOG",
    "DeclarationEntry",
    "DoctypeChecker",
    "DoctypeOutcome",
    "DoctypeUsageError",
    "RewriteResult",
    "rewrite_declaration",
]
