"""Configuration helpers for fix run options."""

from .options import DEFAULT_PIN_COMMENT, FixOptions, load_fix_options

__all__ = ["DEFAULT_PIN_COMMENT", "FixOptions", "load_fix_options"]
