from pathlib import Path
from typing import Any, Callable

import pytest
from pydicom.dataset import Dataset, FileMetaDataset
from pydicom.uid import UID, ExplicitVRLittleEndian, generate_uid

from dcmsort.dicom import DicomMeta

CT_IMAGE_STORAGE = UID("1.2.840.10008.5.1.4.1.1.2")
AXIAL = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0)

MakeDicom = Callable[..., Path]


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "input"
    directory.mkdir()
    return directory


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "output"


@pytest.fixture
def make_dicom(input_dir: Path) -> MakeDicom:
    """Write a small header-only DICOM file with the given tags.

    >>> make_dicom("a.dcm", StudyInstanceUID="1.2", InstanceNumber=3)
    """

    def _make(name: str, directory: Path | None = None, **tags: Any) -> Path:
        ds = Dataset()
        ds.SOPClassUID = CT_IMAGE_STORAGE
        for keyword, value in tags.items():
            setattr(ds, keyword, value)

        file_meta = FileMetaDataset()
        file_meta.MediaStorageSOPClassUID = CT_IMAGE_STORAGE
        file_meta.MediaStorageSOPInstanceUID = UID(
            tags.get("SOPInstanceUID", generate_uid())
        )
        file_meta.ImplementationClassUID = UID("1.2.3.4")
        file_meta.TransferSyntaxUID = ExplicitVRLittleEndian
        ds.file_meta = file_meta

        path = (directory or input_dir) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        ds.save_as(path, enforce_file_format=True)
        return path

    return _make


MakeMeta = Callable[..., DicomMeta]


@pytest.fixture
def make_meta() -> MakeMeta:
    """Build a record without touching the filesystem."""

    def _make(name: str = "a.dcm", **fields: Any) -> DicomMeta:
        return DicomMeta(path=Path("/data") / name, **fields)

    return _make


@pytest.fixture
def make_axial(make_meta: MakeMeta) -> Callable[..., DicomMeta]:
    """A record of an axial slice at height `z`."""

    def _make(name: str, z: float, **fields: Any) -> DicomMeta:
        return make_meta(
            name,
            spatial_position=(0.0, 0.0, z),
            spatial_orientation=AXIAL,
            **fields,
        )

    return _make
