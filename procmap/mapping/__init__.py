"""Field-order resolution, statement building and row mapping."""

from procmap.mapping.binder import bind_parameters
from procmap.mapping.cache import MappingCache
from procmap.mapping.fields import ORDER_KEY, ordered, ordered_field
from procmap.mapping.materializer import materialize, scan_first_int
from procmap.mapping.resolver import FieldSequence, resolve_field_order
from procmap.mapping.statement import build_statement, placeholder_for

__all__ = [
    'FieldSequence',
    'MappingCache',
    'ORDER_KEY',
    'bind_parameters',
    'build_statement',
    'materialize',
    'ordered',
    'ordered_field',
    'placeholder_for',
    'resolve_field_order',
    'scan_first_int',
]
