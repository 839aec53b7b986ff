"""
Utility functions for identifier handling across the dump loader.
"""

import re


class NameUtils:
    """Utility methods for converting source identifiers to database identifiers."""

    # Cached regex patterns for performance
    _regex_cache = {
        'camel_boundary': re.compile(r'([a-z])([A-Z])'),
    }

    @staticmethod
    def to_snake_case(name: str) -> str:
        """
        Convert a mixed or camel case identifier to lower snake case.

        An underscore is inserted between a lowercase letter and an immediately
        following uppercase letter, then everything is lowercased. Already
        snake_case input is returned unchanged.

        Examples:
            'PostLinks' -> 'post_links'
            'postLinks' -> 'post_links'
            'Id' -> 'id'
            'TagBased' -> 'tag_based'

        Args:
            name: Source identifier

        Returns:
            Lowercase, underscore separated identifier
        """
        return NameUtils._regex_cache['camel_boundary'].sub(r'\1_\2', name).lower()
