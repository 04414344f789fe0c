"""Streaming encoder and decoder for the LZ4 frame format."""

__version__ = "0.11.5"

__all__ = ["checksum", "decoder", "encoder", "errors", "fastcpy", "header", "sink"]