"""Header-only metadata extraction.

A `DicomMeta` is the one record every later stage works on: grouping,
ordering, destination naming and the JSON report. Missing tags stay
`None` here; sentinel names such as ``UNKNOWN_STUDY`` are only
substituted where a value is consumed.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, TypeAlias

import numpy as np
from pydicom.dataset import Dataset
from pydicom.multival import MultiValue

from dcmsort.dicom.dicom_reader import load_dicom
from dcmsort.loggers import logger

__all__ = [
    "HEADER_TAGS",
    "DicomMeta",
    "read_meta",
    "read_meta_or_none",
]

Position: TypeAlias = Tuple[float, float, float]
Orientation: TypeAlias = Tuple[float, float, float, float, float, float]

HEADER_TAGS: List[str] = [
    "PatientID",
    "PatientName",
    "StudyInstanceUID",
    "SeriesInstanceUID",
    "SOPInstanceUID",
    "Modality",
    "StudyDate",
    "SeriesNumber",
    "InstanceNumber",
    "StudyDescription",
    "SeriesDescription",
    "ImagePositionPatient",
    "ImageOrientationPatient",
]


@dataclass(frozen=True)
class DicomMeta:
    """Metadata of a single DICOM file.

    Attributes
    ----------
    path : Path
        Location of the file, and the identity of the record.
    spatial_position : tuple of 3 floats, optional
        ImagePositionPatient.
    spatial_orientation : tuple of 6 floats, optional
        ImageOrientationPatient: row direction cosines followed by
        column direction cosines.
    """

    path: Path

    patient_id: Optional[str] = None
    patient_name: Optional[str] = None

    study_id: Optional[str] = None
    series_id: Optional[str] = None
    sop_id: Optional[str] = None

    modality: Optional[str] = None
    study_date: Optional[str] = None
    series_number: Optional[int] = None
    instance_number: Optional[int] = None

    study_description: Optional[str] = None
    series_description: Optional[str] = None

    spatial_position: Optional[Position] = None
    spatial_orientation: Optional[Orientation] = None

    def geom_order(self) -> float | None:
        """Signed distance of the slice along the stack normal.

        ``dot(position, cross(row, col))``, or None when either geometry
        field is missing, or any component or the result is not finite.
        """
        if self.spatial_position is None or self.spatial_orientation is None:
            return None
        values = (*self.spatial_position, *self.spatial_orientation)
        if not all(math.isfinite(v) for v in values):
            return None

        row = np.asarray(self.spatial_orientation[:3])
        col = np.asarray(self.spatial_orientation[3:])
        with np.errstate(over="ignore", invalid="ignore"):
            normal = np.cross(row, col)
            scalar = float(np.dot(np.asarray(self.spatial_position), normal))
        # huge components can still overflow to inf or nan
        return scalar if math.isfinite(scalar) else None

    @property
    def has_geometry(self) -> bool:
        return self.geom_order() is not None

    def stable_id(self) -> str:
        """SOPInstanceUID, or the file name when the UID is missing."""
        return self.sop_id if self.sop_id is not None else self.path.name

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation used by the report."""
        record = asdict(self)
        record["path"] = str(self.path)
        for key in ("spatial_position", "spatial_orientation"):
            if record[key] is not None:
                record[key] = list(record[key])
        return record


def _get(ds: Dataset, keyword: str) -> Any:  # noqa: ANN401
    try:
        return ds.get(keyword)
    except (ValueError, TypeError, KeyError) as e:
        logger.debug("Unreadable tag value", tag=keyword, error=str(e))
        return None


def _opt_str(ds: Dataset, keyword: str) -> str | None:
    value = _get(ds, keyword)
    if value is None:
        return None
    if isinstance(value, MultiValue):
        value = "\\".join(str(v) for v in value)
    text = str(value).strip()
    return text or None


def _opt_int(ds: Dataset, keyword: str) -> int | None:
    text = _opt_str(ds, keyword)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _opt_floats(ds: Dataset, keyword: str, count: int) -> Tuple[float, ...] | None:
    value = _get(ds, keyword)
    if value is None:
        return None
    items = list(value) if isinstance(value, (MultiValue, list, tuple)) else [value]
    if len(items) != count:
        return None
    try:
        return tuple(float(v) for v in items)
    except (TypeError, ValueError):
        return None


def read_meta(path: Path, force: bool = False) -> DicomMeta:
    """Read the header fields of one DICOM file.

    Parameters
    ----------
    path : Path
        The file to read. Pixel data is never loaded.
    force : bool, default=False
        Passed to `pydicom.dcmread`.

    Returns
    -------
    DicomMeta
        The metadata record, with absent or malformed fields set to None.

    Raises
    ------
    pydicom.errors.InvalidDicomError
        If the file is not a DICOM file.
    OSError
        If the file cannot be read.
    """
    ds = load_dicom(path, force=force, specific_tags=HEADER_TAGS)

    return DicomMeta(
        path=path,
        patient_id=_opt_str(ds, "PatientID"),
        patient_name=_opt_str(ds, "PatientName"),
        study_id=_opt_str(ds, "StudyInstanceUID"),
        series_id=_opt_str(ds, "SeriesInstanceUID"),
        sop_id=_opt_str(ds, "SOPInstanceUID"),
        modality=_opt_str(ds, "Modality"),
        study_date=_opt_str(ds, "StudyDate"),
        series_number=_opt_int(ds, "SeriesNumber"),
        instance_number=_opt_int(ds, "InstanceNumber"),
        study_description=_opt_str(ds, "StudyDescription"),
        series_description=_opt_str(ds, "SeriesDescription"),
        spatial_position=_opt_floats(ds, "ImagePositionPatient", 3),  # type: ignore[arg-type]
        spatial_orientation=_opt_floats(ds, "ImageOrientationPatient", 6),  # type: ignore[arg-type]
    )


def read_meta_or_none(path: Path, force: bool = False) -> DicomMeta | None:
    """Like `read_meta`, but returns None for unreadable or non-DICOM files."""
    try:
        return read_meta(path, force=force)
    except Exception as e:  # noqa: BLE001
        logger.debug("Skipping unreadable file", path=path, error=str(e))
        return None
