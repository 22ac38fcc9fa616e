import os
from itertools import islice
from pathlib import Path
from typing import Generator, List

from dcmsort.exceptions import DirectoryNotFoundError
from dcmsort.loggers import logger


def find_dicoms(
    directory: Path,
    follow_symlinks: bool = False,
    extension: str | None = None,
    case_sensitive: bool = False,
    limit: int | None = None,
) -> List[Path]:
    """Locate candidate DICOM files in a directory tree.

    Every regular file is a candidate unless `extension` is given: DICOM
    files are very often written without any extension, so whether a file
    is really DICOM is left to the header reader.

    Parameters
    ----------
    directory : Path
        The root directory to walk.
    follow_symlinks : bool, default=False
        Whether to descend into symlinked directories.
    extension : str, optional
        Only keep files with this extension (e.g. "dcm").
    case_sensitive : bool, default=False
        Whether the extension comparison is case-sensitive.
    limit : int, optional
        Maximum number of files to return.

    Returns
    -------
    List[Path]
        Absolute paths of candidate files, sorted.

    Raises
    ------
    DirectoryNotFoundError
        If `directory` does not exist or is not a directory.

    Examples
    --------
    >>> find_dicoms(Path("/data"))
    [PosixPath('/data/IM0001'), PosixPath('/data/sub/scan2.dcm')]

    >>> find_dicoms(Path("/data"), extension="dcm")
    [PosixPath('/data/sub/scan2.dcm')]
    """
    if not directory.is_dir():
        msg = f"Directory {directory} does not exist or is not a directory."
        raise DirectoryNotFoundError(msg)

    logger.debug(
        "Searching for DICOM files",
        directory=directory,
        follow_symlinks=follow_symlinks,
        extension=extension,
        case_sensitive=case_sensitive,
    )

    files = sorted(
        _walk_files(directory, follow_symlinks, extension, case_sensitive)
    )
    return list(islice(files, limit)) if limit else files


def _walk_files(
    directory: Path,
    follow_symlinks: bool,
    extension: str | None,
    case_sensitive: bool,
) -> Generator[Path, None, None]:
    suffix = f".{extension.lstrip('.')}" if extension else ""
    if suffix and not case_sensitive:
        suffix = suffix.lower()

    for root, _dirs, names in os.walk(directory, followlinks=follow_symlinks):
        for name in names:
            file = Path(root, name)
            if not file.is_file():
                continue
            if file.is_symlink() and not follow_symlinks:
                continue
            if suffix:
                file_suffix = file.suffix if case_sensitive else file.suffix.lower()
                if file_suffix != suffix:
                    continue
            yield file.absolute()
