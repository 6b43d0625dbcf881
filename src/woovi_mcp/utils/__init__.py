"""Utility modules for the Woovi client."""

from woovi_mcp.utils.masking import MASKING_RULES, mask_sensitive_data, mask_value

__all__ = ["MASKING_RULES", "mask_sensitive_data", "mask_value"]
