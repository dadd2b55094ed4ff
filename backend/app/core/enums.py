from __future__ import annotations

from enum import StrEnum


class PlaceholderLabel(StrEnum):
    DEPARTMENT = "department"
    DOCUMENT_TYPE = "doctype"
    YEAR_2 = "year2"
    YEAR_4 = "year4"
    MONTH_2 = "month2"
    SEQUENCE = "seq"
