"""
Built-in table catalogue for the Stack Exchange data dump.

Each table matches the attribute layout of the corresponding ``<name>.xml.gz``
file of the public dump. The catalogue is built by calling
``stack_exchange_tables()`` once at process start and handed to the importer.
"""

from typing import Tuple

from ..models import Column, SqlType, Table, UNBOUNDED


def _badges() -> Table:
    return Table("badges", (
        Column.fixed("Id", SqlType.INTEGER),
        Column.fixed("UserId", SqlType.INTEGER),
        Column.variable("Name", 50),
        Column.fixed("Date", SqlType.TIMESTAMP),
        Column.fixed("Class", SqlType.SMALLINT),
        Column.fixed("TagBased", SqlType.BOOLEAN),
    ))


def _comments() -> Table:
    return Table("comments", (
        Column.fixed("Id", SqlType.INTEGER),
        Column.fixed("PostId", SqlType.INTEGER),
        Column.fixed("Score", SqlType.INTEGER),
        Column.variable("Text", 600),
        Column.fixed("CreationDate", SqlType.TIMESTAMP),
        Column.variable("UserDisplayName", 40).with_nulls(),
        Column.fixed("UserId", SqlType.INTEGER),
        Column.variable("ContentLicense", 12),
    ))


def _post_links() -> Table:
    return Table("postLinks", (
        Column.fixed("Id", SqlType.INTEGER),
        Column.fixed("CreationDate", SqlType.TIMESTAMP),
        Column.fixed("PostId", SqlType.INTEGER),
        Column.fixed("RelatedPostId", SqlType.INTEGER),
        Column.fixed("LinkTypeId", SqlType.SMALLINT),
    ))


def _posts() -> Table:
    return Table("posts", (
        Column.fixed("Id", SqlType.INTEGER),
        Column.fixed("PostTypeId", SqlType.SMALLINT),
        Column.fixed("AcceptedAnswerId", SqlType.INTEGER),
        Column.fixed("ParentId", SqlType.INTEGER).with_nulls(),
        Column.fixed("CreationDate", SqlType.TIMESTAMP),
        Column.fixed("DeletionDate", SqlType.TIMESTAMP).with_nulls(),
        Column.fixed("Score", SqlType.INTEGER),
        Column.fixed("ViewCount", SqlType.INTEGER),
        Column.variable("Body", UNBOUNDED),
        Column.fixed("OwnerUserId", SqlType.INTEGER),
        Column.variable("OwnerDisplayName", 40).with_nulls(),
        Column.fixed("LastEditorUserId", SqlType.INTEGER),
        Column.variable("LastEditorDisplayName", 40),
        Column.fixed("LastEditDate", SqlType.TIMESTAMP),
        Column.fixed("LastActivityDate", SqlType.TIMESTAMP),
        Column.variable("Title", 250),
        Column.variable("Tags", 250),
        Column.fixed("AnswerCount", SqlType.INTEGER),
        Column.fixed("CommentCount", SqlType.INTEGER),
        Column.fixed("FavoriteCount", SqlType.INTEGER),
        Column.fixed("ClosedDate", SqlType.TIMESTAMP).with_nulls(),
        Column.fixed("CommunityOwnedDate", SqlType.TIMESTAMP).with_nulls(),
        Column.variable("ContentLicense", 12),
    ))


def _tags() -> Table:
    return Table("tags", (
        Column.fixed("Id", SqlType.INTEGER),
        Column.variable("TagName", 35),
        Column.fixed("Count", SqlType.INTEGER),
        Column.fixed("ExcerptPostId", SqlType.INTEGER),
        Column.fixed("WikiPostId", SqlType.INTEGER),
        Column.fixed("IsModeratorOnly", SqlType.BOOLEAN).with_nulls(),
        Column.fixed("IsRequired", SqlType.BOOLEAN).with_nulls(),
    ))


def _users() -> Table:
    return Table("users", (
        Column.fixed("Id", SqlType.INTEGER),
        Column.fixed("Reputation", SqlType.INTEGER),
        Column.fixed("CreationDate", SqlType.TIMESTAMP),
        Column.variable("DisplayName", 40),
        Column.fixed("LastAccessDate", SqlType.TIMESTAMP),
        Column.variable("WebsiteUrl", 200).with_nulls(),
        Column.variable("Location", 100).with_nulls(),
        Column.variable("AboutMe", UNBOUNDED),
        Column.fixed("Views", SqlType.INTEGER),
        Column.fixed("UpVotes", SqlType.INTEGER),
        Column.fixed("DownVotes", SqlType.INTEGER),
        Column.variable("ProfileImageUrl", 200).with_nulls(),
        Column.variable("EmailHash", 32).with_nulls(),
        Column.fixed("AccountId", SqlType.INTEGER).with_nulls(),
    ))


def _votes() -> Table:
    return Table("votes", (
        Column.fixed("Id", SqlType.INTEGER),
        Column.fixed("PostId", SqlType.INTEGER),
        Column.fixed("VoteTypeId", SqlType.SMALLINT),
        Column.fixed("UserId", SqlType.INTEGER).with_nulls(),
        Column.fixed("CreationDate", SqlType.TIMESTAMP),
        Column.fixed("BountyAmount", SqlType.INTEGER).with_nulls(),
    ))


def stack_exchange_tables() -> Tuple[Table, ...]:
    """
    Build the ordered catalogue of dump tables.

    Returns:
        Tuple of Badges, Comments, PostLinks, Posts, Tags, Users and Votes descriptors
    """
    return (
        _badges(),
        _comments(),
        _post_links(),
        _posts(),
        _tags(),
        _users(),
        _votes(),
    )
