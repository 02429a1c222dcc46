from .sss import (
    SSS_BY_FAMILY_SCHEMA,
    EmptyFilterResult,
    SchemaMismatchError,
    StandardSource,
    load_standards,
    normalize_standard,
)
