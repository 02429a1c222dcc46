from .schema import (
    SSS_BY_FAMILY_SCHEMA,
    Field,
    SchemaDescriptor,
    SchemaMismatchError,
    clean_column_name,
    get_schema,
)
from .raw_sss import StandardSource, load_standard_sheet, load_standards
from .line_items import (
    FAMILY_TYPE_LABELS,
    LINE_GROUPS,
    LineGroup,
    classify_line_item,
    decode_family_type,
    line_item_label,
)
from .sss import (
    EmptyFilterResult,
    adjust_for_inflation,
    filter_standard,
    normalize_standard,
    to_line_items,
    to_long,
    to_wide,
)
