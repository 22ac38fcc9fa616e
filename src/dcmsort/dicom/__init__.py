# ruff: noqa
from .dicom_find import find_dicoms
from .dicom_reader import load_dicom
from .metadata import HEADER_TAGS, DicomMeta, read_meta, read_meta_or_none

__all__ = [
    # dicom_find
    "find_dicoms",
    # dicom_reader
    "load_dicom",
    # metadata
    "HEADER_TAGS",
    "DicomMeta",
    "read_meta",
    "read_meta_or_none",
]
