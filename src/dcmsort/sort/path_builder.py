"""Destination paths for sorted files.

Each directory level is built from identifiers only, unless PHI is
explicitly requested, in which case names, dates and descriptions are
prefixed to the identifiers. Every level is sanitized on its own before
being joined.
"""

from pathlib import Path

from dcmsort.dicom.metadata import DicomMeta
from dcmsort.sort.grouping import UNKNOWN_SERIES, UNKNOWN_STUDY
from dcmsort.sort.types import Layout
from dcmsort.utils import sanitize_component

UNKNOWN_PATIENT = "UNKNOWN_PATIENT"
UNKNOWN_SOP = "UNKNOWN_SOP"

FILE_SUFFIX = ".dcm"
INDEX_WIDTH = 5


def _or(value: object | None, default: str) -> str:
    return default if value is None else str(value)


def patient_component(meta: DicomMeta, include_phi: bool) -> str:
    patient_id = _or(meta.patient_id, UNKNOWN_PATIENT)
    if include_phi:
        return sanitize_component(f"{patient_id}_{_or(meta.patient_name, '')}")
    return sanitize_component(patient_id)


def study_component(meta: DicomMeta, include_phi: bool) -> str:
    study_id = _or(meta.study_id, UNKNOWN_STUDY)
    if include_phi:
        date = _or(meta.study_date, "")
        description = _or(meta.study_description, "")
        return sanitize_component(f"{date}_{description}_{study_id}")
    return sanitize_component(study_id)


def series_component(meta: DicomMeta, include_phi: bool) -> str:
    series_id = _or(meta.series_id, UNKNOWN_SERIES)
    if include_phi:
        modality = _or(meta.modality, "")
        number = _or(meta.series_number, "")
        description = _or(meta.series_description, "")
        return sanitize_component(
            f"{modality}_{number}_{description}_{series_id}"
        )
    return sanitize_component(series_id)


def file_name(meta: DicomMeta, order_index: int) -> str:
    """``00001_<sop>.dcm`` for the first file of a series."""
    sop = sanitize_component(_or(meta.sop_id, UNKNOWN_SOP))
    return f"{order_index + 1:0{INDEX_WIDTH}d}_{sop}{FILE_SUFFIX}"


def build_destination(
    out_root: Path,
    layout: Layout,
    include_phi: bool,
    meta: DicomMeta,
    order_index: int,
) -> Path:
    """Compute where one file goes.

    Parameters
    ----------
    out_root : Path
        The output directory.
    layout : Layout
        Which levels to create below `out_root`.
    include_phi : bool
        Whether patient name, dates and descriptions may appear in names.
    meta : DicomMeta
        The file's metadata.
    order_index : int
        Zero-based position of the file within its sorted series.

    Returns
    -------
    Path
        The destination, not yet checked for collisions.

    Examples
    --------
    >>> meta = DicomMeta(
    ...     path=Path("in/a.dcm"),
    ...     patient_id="P1",
    ...     study_id="1.2.3",
    ...     series_id="1.2.3.4",
    ...     sop_id="1.2.3.4.5",
    ... )
    >>> build_destination(Path("out"), Layout.PATIENT_STUDY_SERIES, False, meta, 0)
    PosixPath('out/P1/1.2.3/1.2.3.4/00001_1.2.3.4.5.dcm')
    """
    name = file_name(meta, order_index)

    match layout:
        case Layout.PATIENT_STUDY_SERIES:
            return (
                out_root
                / patient_component(meta, include_phi)
                / study_component(meta, include_phi)
                / series_component(meta, include_phi)
                / name
            )
        case Layout.STUDY_SERIES:
            return (
                out_root
                / study_component(meta, include_phi)
                / series_component(meta, include_phi)
                / name
            )
        case Layout.SERIES_ONLY:
            return out_root / series_component(meta, include_phi) / name
        case Layout.FLAT:
            return out_root / name
