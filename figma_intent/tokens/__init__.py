"""Design token inference."""

from .inference import DesignToken, TokenCategory, infer_design_tokens

__all__ = ["DesignToken", "TokenCategory", "infer_design_tokens"]
