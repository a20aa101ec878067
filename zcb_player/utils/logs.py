import logging
import logging.config
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import click
import structlog

#: Logger levels; the console handler only shows events at or above the root level.
DEFAULT_LOG_LEVELS = {"": "INFO", "zcb_player": "DEBUG", "web3": "WARNING"}

_SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S.%f"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def construct_log_file_name(sub_command: str, log_dir: Path, scenario_fpath: Path = None) -> str:
    """Return the path of the debug log file for a CLI invocation.

    Runs of a scenario are grouped in a directory named after the scenario file.
    """
    directory = log_dir
    if scenario_fpath:
        file_name = (
            f"zcb-player-{sub_command}_{scenario_fpath.stem}"
            f"_{datetime.now():%Y-%m-%dT%H:%M:%S}.log"
        )
        directory = directory.joinpath("scenarios", scenario_fpath.stem)
    else:
        file_name = f"zcb-player-{sub_command}_{datetime.now():%Y-%m-%dT%H:%M:%S}.log"
    return str(directory.joinpath(file_name))


def configure_logging(
    logger_level_config: Dict[str, str] = None,
    debug_log_file_path: Optional[str] = None,
    colorize: bool = True,
) -> None:
    """Route structlog events through the stdlib :mod:`logging` machinery.

    Console output is rendered for humans at the levels given in
    `logger_level_config`, merged over :data:`DEFAULT_LOG_LEVELS`. If
    `debug_log_file_path` is given, every event the logger levels let through
    is additionally written to that file as JSON.
    """
    levels = dict(DEFAULT_LOG_LEVELS)
    levels.update(logger_level_config or {})

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": levels[""],
            "formatter": "plain",
        }
    }
    if debug_log_file_path:
        Path(debug_log_file_path).parent.mkdir(exist_ok=True, parents=True)
        handlers["debug-file"] = {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "json",
            "filename": debug_log_file_path,
            "mode": "a",
            "encoding": "utf-8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": structlog.dev.ConsoleRenderer(colors=colorize),
                    "foreign_pre_chain": _SHARED_PROCESSORS,
                },
                "json": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": structlog.processors.JSONRenderer(default=repr),
                    "foreign_pre_chain": _SHARED_PROCESSORS,
                },
            },
            "handlers": handlers,
            "root": {"handlers": list(handlers), "level": "DEBUG"},
        }
    )
    for logger_name, level in levels.items():
        if logger_name:
            logging.getLogger(logger_name).setLevel(level)

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level]
        + _SHARED_PROCESSORS
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_logging_for_subcommand(log_file_name: str) -> None:
    click.secho(f"Writing log to {log_file_name}", fg="yellow")
    configure_logging({"": "INFO", "zcb_player": "DEBUG"}, debug_log_file_path=log_file_name)
