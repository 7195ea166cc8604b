"""A minimal language server for CUDA sources speaking LSP over stdio."""

__version__ = "0.0.1"