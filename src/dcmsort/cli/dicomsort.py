import pathlib

import click
from click.core import ParameterSource
from pydantic import ValidationError

from dcmsort import __version__
from dcmsort.cli import set_log_verbosity
from dcmsort.config import SortSettings
from dcmsort.exceptions import DicomSortError, DirectoryNotFoundError
from dcmsort.loggers import logger
from dcmsort.sort import DICOMSorter, FileAction, Layout, SortBy

# options that map one-to-one onto SortSettings fields
SETTINGS_OPTIONS = (
    "mode",
    "layout",
    "sort_by",
    "include_phi",
    "follow_symlinks",
    "dry_run",
    "num_workers",
    "report",
)


@click.command()
@click.option(
    "--input",
    "-i",
    "input_directory",
    required=True,
    type=click.Path(
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
        path_type=pathlib.Path,
        resolve_path=True,
    ),
    help="Directory containing the DICOM files to sort.",
)
@click.option(
    "--output",
    "-o",
    "output_directory",
    required=True,
    type=click.Path(
        file_okay=False,
        writable=True,
        path_type=pathlib.Path,
        resolve_path=True,
    ),
    help="Root of the sorted tree. Created on demand.",
)
@click.option(
    "--mode",
    type=click.Choice(FileAction.choices(), case_sensitive=False),
    default=FileAction.COPY.value,
    show_default=True,
    help="How files are placed in the output tree.",
)
@click.option(
    "-n",
    "--dry-run",
    is_flag=True,
    help="Print planned operations without touching the filesystem.",
)
@click.option(
    "--follow-symlinks",
    is_flag=True,
    help="Follow symlinked directories while scanning.",
)
@click.option(
    "--layout",
    type=click.Choice(Layout.choices(), case_sensitive=False),
    default=Layout.PATIENT_STUDY_SERIES.value,
    show_default=True,
    help="Directory levels below the output root.",
)
@click.option(
    "--sort-by",
    type=click.Choice(SortBy.choices(), case_sensitive=False),
    default=SortBy.AUTO.value,
    show_default=True,
    help="Ordering within a series. `auto` uses geometry only when every file of the series has it.",
)
@click.option(
    "--include-phi",
    is_flag=True,
    help="Allow patient name, dates and descriptions in directory names.",
)
@click.option(
    "--report",
    type=click.Path(dir_okay=False, writable=True, path_type=pathlib.Path),
    default=None,
    help="Write a JSON report of every extracted header to this file.",
)
@click.option(
    "-j",
    "--num-workers",
    type=int,
    default=1,
    show_default=True,
    help="Number of parallel jobs used to read headers.",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path),
    default=None,
    help="YAML file with default values for these options.",
)
@set_log_verbosity()
@click.version_option(
    version=__version__,
    package_name="dcmsort",
    prog_name="dcmsort",
)
@click.help_option(
    "-h",
    "--help",
)
@click.pass_context
def dicomsort(
    ctx: click.Context,
    input_directory: pathlib.Path,
    output_directory: pathlib.Path,
    config_file: pathlib.Path | None,
    verbose: int,
    quiet: bool,
    **options: object,
) -> None:
    """Sort DICOM files into a patient/study/series hierarchy.

    Files are read header-only, grouped by series, ordered by slice
    geometry or instance number, and renamed to 00001_<SOPInstanceUID>.dcm.
    """
    overrides = {
        name: options[name]
        for name in SETTINGS_OPTIONS
        if ctx.get_parameter_source(name) != ParameterSource.DEFAULT
    }
    try:
        settings = SortSettings.load(config_file, **overrides)
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e

    logger.info(f"Sorting DICOM files in {input_directory}.")
    logger.debug("Debug Args", settings=settings.model_dump())

    try:
        sorter = DICOMSorter(
            source_directory=input_directory,
            output_directory=output_directory,
            layout=settings.layout,
            sort_by=settings.sort_by,
            include_phi=settings.include_phi,
            follow_symlinks=settings.follow_symlinks,
            num_workers=settings.num_workers,
        )
        result = sorter.execute(
            action=settings.mode,
            dry_run=settings.dry_run,
            report=settings.report,
        )
    except (DicomSortError, DirectoryNotFoundError, OSError) as e:
        logger.exception("Sorting failed")
        raise click.ClickException(str(e)) from e

    click.echo(
        f"Processed {len(sorter.metas)} DICOM files "
        f"({len(result)} {'planned' if result.dry_run else 'placed'})."
    )


if __name__ == "__main__":
    dicomsort()
