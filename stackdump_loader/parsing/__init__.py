"""Streaming decompression and tokenization of dump files."""

from .xml_parser import RowReader, ROW_TAG

__all__ = ['RowReader', 'ROW_TAG']
