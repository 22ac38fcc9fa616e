# ruff: noqa: I001
"""
Sorting DICOM Files into a Series Hierarchy.

Files are grouped by (StudyInstanceUID, SeriesInstanceUID), ordered
within each series, and given a deterministic destination:

```
out/
└── {PatientID}/
    └── {StudyInstanceUID}/
        └── {SeriesInstanceUID}/
            ├── 00001_{SOPInstanceUID}.dcm
            └── 00002_{SOPInstanceUID}.dcm
```

Ordering within a series uses the slice position along the stack normal
when every file of the series has usable geometry (or when forced), and
InstanceNumber otherwise. Ties are broken by SOPInstanceUID, then file
name, so the same input always produces the same output.

By default only identifiers appear in names. Patient names, dates and
descriptions are added only when PHI is explicitly included.
"""

from dcmsort.sort.types import Layout, SortBy
from dcmsort.sort.grouping import (
    UNKNOWN_SERIES,
    UNKNOWN_STUDY,
    GroupKey,
    group_by_series,
)
from dcmsort.sort.ordering import compare, order_group, use_geometry
from dcmsort.sort.path_builder import (
    UNKNOWN_PATIENT,
    UNKNOWN_SOP,
    build_destination,
)
from dcmsort.sort.sort_method import (
    ExecutionResult,
    FileAction,
    execute,
    handle_file,
    unique_path,
)
from dcmsort.sort.planner import PlanEntry, plan_operations
from dcmsort.sort.report import write_json_report
from dcmsort.sort.scan import scan
from dcmsort.sort.dicomsorter import DICOMSorter

__all__ = [
    "Layout",
    "SortBy",
    "FileAction",
    "UNKNOWN_PATIENT",
    "UNKNOWN_SERIES",
    "UNKNOWN_SOP",
    "UNKNOWN_STUDY",
    "GroupKey",
    "group_by_series",
    "compare",
    "order_group",
    "use_geometry",
    "build_destination",
    "ExecutionResult",
    "execute",
    "handle_file",
    "unique_path",
    "PlanEntry",
    "plan_operations",
    "write_json_report",
    "scan",
    "DICOMSorter",
]
