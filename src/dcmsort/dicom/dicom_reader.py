import os
from pathlib import Path
from typing import Any

from pydicom import dcmread
from pydicom.dataset import FileDataset


def load_dicom(
    dicom_input: str | Path,
    force: bool = False,
    stop_before_pixels: bool = True,
    **kwargs: Any,  # noqa: ANN401
) -> FileDataset:
    """Load the header of a DICOM file.

    Parameters
    ----------
    dicom_input : str | Path
        Path of the DICOM file.
    force : bool, optional
        Whether to allow reading files missing the *File Meta Information*
        header, by default False so that arbitrary files are rejected.
    stop_before_pixels : bool, optional
        Whether to stop reading before the pixel data, by default True.
    **kwargs
        Additional keyword arguments to pass to `pydicom.dcmread`,
        i.e `specific_tags`.

    Returns
    -------
    FileDataset
        Parsed DICOM dataset.

    Raises
    ------
    pydicom.errors.InvalidDicomError
        If the file is not a DICOM file.
    OSError
        If the file cannot be opened.
    """
    return dcmread(
        os.fspath(dicom_input),
        force=force,
        stop_before_pixels=stop_before_pixels,
        **kwargs,
    )
