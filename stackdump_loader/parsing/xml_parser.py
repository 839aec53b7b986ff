"""
Streaming reader for gzip-compressed dump files.

This module decompresses a dump file on the fly and tokenizes it with
lxml.etree.iterparse, yielding the attributes of each ``row`` element without
ever building the whole document tree.
"""

import gzip
import logging

from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from lxml import etree

from ..exceptions import SourceStreamError, XMLParsingError
from ..interfaces import RowReaderInterface


ROW_TAG = "row"

Attributes = List[Tuple[str, str]]


class RowReader(RowReaderInterface):
    """
    Forward-only reader over the row elements of one dump file.

    Use as a context manager; the decompressing stream is released on exit, also when
    iteration stops early because of an error. ``rows()`` may be iterated once per
    open reader and cannot resume a previous iteration.

    Memory stays bounded: each row element is cleared once its attributes were
    yielded, and already processed siblings are detached from the root.
    """

    def __init__(self, source_path: Union[str, Path], table_name: str = None,
                 row_tag: str = ROW_TAG):
        """
        Initialize row reader.

        Args:
            source_path: Path to a gzip-compressed XML dump file
            table_name: Table the file belongs to (for error messages)
            row_tag: Name of the record element
        """
        self.source_path = Path(source_path)
        self.table_name = table_name
        self.row_tag = row_tag
        self.logger = logging.getLogger(__name__)

        self._stream: Optional[gzip.GzipFile] = None
        self.rows_read = 0

    def open(self) -> 'RowReader':
        """
        Open the decompressing byte stream.

        Raises:
            SourceStreamError: If the file cannot be opened
        """
        try:
            self._stream = gzip.open(self.source_path, 'rb')
        except OSError as e:
            error_msg = f"Failed to open dump file {self.source_path}: {e}"
            self.logger.error(error_msg)
            raise SourceStreamError(error_msg, str(self.source_path), self.table_name)

        self.logger.debug(f"Opened dump file {self.source_path}")
        return self

    def close(self) -> None:
        """Release the byte stream. Safe to call more than once."""
        if self._stream is not None:
            try:
                self._stream.close()
            except OSError as e:
                self.logger.warning(f"Error while closing dump file {self.source_path}: {e}")
            self._stream = None

    def rows(self) -> Iterator[Attributes]:
        """
        Yield the attribute (name, value) pairs of every row element in document order.

        Raises:
            SourceStreamError: If reading or decompressing the file fails
            XMLParsingError: If the decompressed content is not well-formed XML
        """
        if self._stream is None:
            raise SourceStreamError(f"Dump file {self.source_path} is not open", str(self.source_path),
                                    self.table_name)

        context = etree.iterparse(
            self._stream,
            events=("end",),
            tag=self.row_tag,
            huge_tree=True,  # Post bodies can exceed libxml2's default text node limit
            resolve_entities=False,
            no_network=True,
        )

        try:
            for _, elem in context:
                attributes = elem.items()
                self.rows_read += 1

                # Clear processed element to free memory
                elem.clear()
                while elem.getprevious() is not None:
                    del elem.getparent()[0]

                yield attributes
        except etree.XMLSyntaxError as e:
            error_msg = f"Malformed XML in {self.source_path} after {self.rows_read} rows: {e}"
            self.logger.error(error_msg)
            raise XMLParsingError(error_msg, str(self.source_path), self.table_name)
        except (OSError, EOFError) as e:
            error_msg = f"Failed to read dump file {self.source_path} after {self.rows_read} rows: {e}"
            self.logger.error(error_msg)
            raise SourceStreamError(error_msg, str(self.source_path), self.table_name)
        finally:
            del context
