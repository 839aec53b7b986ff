"""Type mapping between dump attribute text, bound values and DDL types."""

from .type_mapping import ddl_type, make_binder, parser_for

__all__ = ['ddl_type', 'make_binder', 'parser_for']
