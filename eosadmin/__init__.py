"""Parsers and command builders for administering EOS storage clusters."""

__version__ = "0.1.0"