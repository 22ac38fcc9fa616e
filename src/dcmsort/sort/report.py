import json
from pathlib import Path
from typing import Sequence

from dcmsort.dicom.metadata import DicomMeta
from dcmsort.exceptions import ReportWriteError
from dcmsort.loggers import logger


def write_json_report(path: Path, metas: Sequence[DicomMeta]) -> None:
    """Write every extracted record as a JSON array.

    Raises
    ------
    ReportWriteError
        If the file cannot be written.
    """
    records = [meta.to_dict() for meta in metas]
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
    except OSError as e:
        raise ReportWriteError(path) from e
    logger.info("Wrote report", path=path, records=len(records))
