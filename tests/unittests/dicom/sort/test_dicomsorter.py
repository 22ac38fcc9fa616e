import json
from pathlib import Path

import pytest
from rich.tree import Tree

from dcmsort.exceptions import SorterBaseError
from dcmsort.sort import DICOMSorter, FileAction, Layout


@pytest.fixture
def series(make_dicom) -> list[Path]:
    return [
        make_dicom(
            f"slice{z}.dcm",
            PatientID="P1",
            StudyInstanceUID="1.2",
            SeriesInstanceUID="1.2.3",
            SOPInstanceUID=f"1.2.3.{z}",
            InstanceNumber=10 - z,
            ImagePositionPatient=[0.0, 0.0, float(z)],
            ImageOrientationPatient=[1, 0, 0, 0, 1, 0],
        )
        for z in (3, 1, 2)
    ]


def test_missing_source_directory(tmp_path: Path) -> None:
    with pytest.raises(SorterBaseError):
        DICOMSorter(tmp_path / "missing", tmp_path / "out")


def test_execute_sorts_by_geometry(input_dir: Path, output_dir: Path, series) -> None:
    (input_dir / "junk.bin").write_bytes(b"\x00" * 10)
    sorter = DICOMSorter(input_dir, output_dir, layout=Layout.SERIES_ONLY)

    result = sorter.execute(FileAction.COPY)

    assert len(sorter.dicom_files) == 4
    assert len(sorter.metas) == 3
    assert sorted(p.name for p in (output_dir / "1.2.3").iterdir()) == [
        "00001_1.2.3.1.dcm",
        "00002_1.2.3.2.dcm",
        "00003_1.2.3.3.dcm",
    ]
    assert len(result) == 3
    assert all(source.exists() for source in series)


def test_dry_run_prints_pairs(input_dir: Path, output_dir: Path, series, capsys) -> None:
    sorter = DICOMSorter(input_dir, output_dir)

    result = sorter.execute("move", dry_run=True)

    out = capsys.readouterr().out
    assert "Dry run mode enabled" in out
    assert "00001_1.2.3.1.dcm" in out
    assert result.dry_run
    assert not output_dir.exists()
    assert all(source.exists() for source in series)


def test_report_written_before_planning(
    input_dir: Path, output_dir: Path, tmp_path: Path, series
) -> None:
    report = tmp_path / "report.json"
    sorter = DICOMSorter(input_dir, output_dir)

    sorter.execute(dry_run=True, report=report)

    records = json.loads(report.read_text())
    assert sorted(r["sop_id"] for r in records) == ["1.2.3.1", "1.2.3.2", "1.2.3.3"]


def test_tree_counts_directories_only(input_dir: Path, output_dir: Path) -> None:
    sorter = DICOMSorter(input_dir, output_dir)
    paths = [
        output_dir / "P1" / "S1" / "SE1" / "00001_a.dcm",
        output_dir / "P1" / "S1" / "SE1" / "00002_b.dcm",
        output_dir / "P1" / "S1" / "SE2" / "00001_c.dcm",
    ]
    tree = Tree("root")

    sorter._build_tree(paths, tree)

    patient = tree.children[0]
    study = patient.children[0]
    series = study.children[0]
    assert str(patient.label) == "P1 (1 unique)"
    assert str(study.label) == "S1 (1 unique)"
    assert str(series.label) == "SE1 (2 unique)"
    assert [str(leaf.label) for leaf in series.children] == ["00001_a.dcm", "00002_b.dcm"]
