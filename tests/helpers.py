"""
Test helpers for building dump files and observing database traffic.

DummyConnection/DummyCursor mimic the parts of a pyodbc connection the loader
uses and record statements, batches, commits and rollbacks.
"""

import gzip

from lxml import etree


class DummyCursor:
    """Mock cursor recording executed statements and batches."""

    def __init__(self, connection):
        self.connection = connection
        self.fast_executemany = False
        self.executed = []
        self.closed = False

    def execute(self, sql, *params):
        if self.connection.fail_on_execute is not None:
            raise self.connection.fail_on_execute
        self.executed.append(sql)
        self.connection.statements.append(sql)

    def executemany(self, sql, params):
        if self.connection.fail_on_executemany is not None:
            raise self.connection.fail_on_executemany
        self.connection.batches.append((sql, list(params)))

    def close(self):
        self.closed = True


class DummyConnection:
    """Mock pyodbc connection with autocommit disabled."""

    def __init__(self):
        self.autocommit = False
        self.cursors = []
        self.statements = []
        self.batches = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.fail_on_execute = None
        self.fail_on_executemany = None
        self.fail_on_commit = None

    def cursor(self):
        cursor = DummyCursor(self)
        self.cursors.append(cursor)
        return cursor

    def commit(self):
        if self.fail_on_commit is not None:
            raise self.fail_on_commit
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True

    def setdecoding(self, *args, **kwargs):
        pass

    def setencoding(self, *args, **kwargs):
        pass

    @property
    def batch_sizes(self):
        return [len(params) for _, params in self.batches]

    @property
    def inserted_rows(self):
        return [row for _, params in self.batches for row in params]


def write_dump_file(path, rows, root_tag="root"):
    """
    Write rows as a gzip-compressed dump file.

    Args:
        path: Target file path
        rows: Iterable of attribute dicts, written in order as row elements
        root_tag: Name of the document element
    """
    root = etree.Element(root_tag)
    for attributes in rows:
        row = etree.SubElement(root, "row")
        for key, value in attributes.items():
            row.set(key, value)

    with gzip.open(path, "wb") as fh:
        fh.write(etree.tostring(root, xml_declaration=True, encoding="utf-8", pretty_print=True))
    return path


def badge_row(badge_id, user_id=2, name="Teacher", date="2014-05-13T00:00:00", badge_class="3",
              tag_based="True"):
    """Attributes of a well-formed Badges row."""
    return {
        "Id": str(badge_id),
        "UserId": str(user_id),
        "Name": name,
        "Date": date,
        "Class": badge_class,
        "TagBased": tag_based,
    }


def comment_row(comment_id, display_name=None):
    """Attributes of a well-formed Comments row, optionally without UserDisplayName."""
    attributes = {
        "Id": str(comment_id),
        "PostId": "35314",
        "Score": "0",
        "Text": "not sure why this is getting downvoted",
        "CreationDate": "2008-09-06T08:07:10.730",
    }
    if display_name is not None:
        attributes["UserDisplayName"] = display_name
    attributes["UserId"] = "1"
    attributes["ContentLicense"] = "CC BY-SA 2.5"
    return attributes
