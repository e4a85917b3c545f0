"""Follow-up scanning, categorization and filtering."""

from mail_hub.followups.models import ALL, CATEGORIES, FollowUpItem, ScanResult
from mail_hub.followups.scanner import FollowUpScanController, build_scan_instruction, filter_items

__all__ = [
    "ALL",
    "CATEGORIES",
    "FollowUpItem",
    "FollowUpScanController",
    "ScanResult",
    "build_scan_instruction",
    "filter_items",
]
