__version__ = "0.1.0"

from .dicom import DicomMeta, find_dicoms, read_meta
from .loggers import logger
from .sort import (
    DICOMSorter,
    FileAction,
    Layout,
    SortBy,
    execute,
    plan_operations,
    scan,
)
from .utils import sanitize_component

__all__ = [
    "DicomMeta",
    "find_dicoms",
    "read_meta",
    "logger",
    "DICOMSorter",
    "FileAction",
    "Layout",
    "SortBy",
    "execute",
    "plan_operations",
    "scan",
    "sanitize_component",
]
