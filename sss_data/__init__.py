from .__version__ import __version__
from .datasets import (
    SSS_BY_FAMILY_SCHEMA,
    EmptyFilterResult,
    SchemaMismatchError,
    StandardSource,
    load_standards,
    normalize_standard,
)
from .utils.uprating import CPITable, MissingYearError, load_cpi_series
