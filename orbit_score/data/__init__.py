from .loader import (
    FacilityExtract,
    load_facility_extract,
    read_table,
    resolve_period,
    filter_period,
    filter_by_case_ids,
    to_case_records,
    to_financial_records,
    to_flag_records,
)

__all__ = [
    "FacilityExtract",
    "load_facility_extract",
    "read_table",
    "resolve_period",
    "filter_period",
    "filter_by_case_ids",
    "to_case_records",
    "to_financial_records",
    "to_flag_records",
]
