from pathlib import Path
from typing import List, Sequence

from joblib import Parallel, delayed  # type: ignore
from tqdm import tqdm

from dcmsort.dicom.metadata import DicomMeta, read_meta_or_none
from dcmsort.loggers import logger, tqdm_logging_redirect
from dcmsort.utils import timer


@timer("Parsing DICOM headers")
def scan(
    paths: Sequence[Path],
    n_jobs: int = 1,
    force: bool = False,
) -> List[DicomMeta]:
    """Read the header of every candidate file in parallel.

    Each file is read independently; files that are not readable DICOM
    are dropped. The result is only returned once every read has
    finished.

    Parameters
    ----------
    paths : Sequence[Path]
        Candidate files.
    n_jobs : int, default=1
        Number of parallel jobs (-1 uses every CPU).
    force : bool, default=False
        Passed to `pydicom.dcmread`.
    """
    description = f"Parsing {len(paths)} DICOM headers"

    with tqdm_logging_redirect():
        results = Parallel(n_jobs=n_jobs)(
            delayed(read_meta_or_none)(path, force)
            for path in tqdm(
                paths,
                desc=description,
                mininterval=1,
                leave=False,
                colour="green",
            )
        )

    metas = [meta for meta in results if meta is not None]
    logger.info(
        "Parsed DICOM headers (others were ignored)",
        parsed=len(metas),
        ignored=len(paths) - len(metas),
    )
    return metas
