"""Options shared by dcmsort commands."""

import logging
from typing import Any, Callable

import click
from click.decorators import FC

# index is the number of -v flags
VERBOSITY_LEVELS = (None, logging.INFO, logging.DEBUG)


def _level_for(count: int) -> int | None:
	return VERBOSITY_LEVELS[min(count, len(VERBOSITY_LEVELS) - 1)]


def set_log_verbosity(
	*param_decls: str,
	logger_name: str = 'dcmsort',
	quiet_decl: tuple = ('--quiet', '-q'),
	**kwargs: Any,  # noqa
) -> Callable[[FC], FC]:
	"""
	Add `-v/--verbose` (repeatable) and `-q/--quiet` options to a command.

	Without either flag the level from `DCMSORT_LOG_LEVEL` is kept.
	`-v` shows at least INFO and `-vv` DEBUG.
	`--quiet` wins over `-v` and leaves only errors.

	Parameters
	----------
	*param_decls : str
		Names for the verbosity flag, `--verbose`/`-v` by default.
	logger_name : str
		The stdlib logger whose level is changed.
	quiet_decl : tuple
		Names for the quiet flag.
	**kwargs : Any
		Passed on to `click.option` for the verbosity flag.
	"""

	def callback(ctx: click.Context, param: click.Parameter, value: int) -> None:
		logger = logging.getLogger(logger_name)
		if ctx.params.get('quiet', False):
			logger.setLevel(logging.ERROR)
			return

		level = _level_for(value)
		if level is None:
			return
		if logger.level and level > logger.level:
			# the environment asked for more detail than -v does
			return
		logger.setLevel(level)

	kwargs.setdefault('count', True)
	kwargs.setdefault('help', 'Show more log output: -v for INFO, -vv for DEBUG.')
	kwargs['callback'] = callback

	def decorator(func: FC) -> FC:
		func = click.option(*(param_decls or ('--verbose', '-v')), **kwargs)(func)
		return click.option(
			*quiet_decl,
			is_flag=True,
			is_eager=True,
			help='Only log errors. Takes precedence over --verbose.',
		)(func)

	return decorator
