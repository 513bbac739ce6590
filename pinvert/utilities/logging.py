"""
Loggers used during the construction and evaluation of PINV generators.

The setup of a generator runs through several numerical searches (support, area, tail cut-off and the
interval construction). What happens in each of them is reported through three kinds of loggers, all of
which are configured in the ``logging`` section of ``bin/config.yaml``:

- :py:attr:`mylog` (section ``logging.mylog``) reports the progress of the setup stages to the user.
- :py:attr:`devlog` (section ``logging.devlog``) traces the inner loops of the searches. It is disabled
  by default.
- :py:class:`LogDescriptor` (section ``logging.code``) attaches a logger named after the owning class,
  e.g. ``PINVGenerator.logger``.
"""
import logging
import sys
from typing import Type

from pinvert.utilities._typing import Instance
from pinvert.utilities.config import pinvert_params


def _configure(logger: logging.Logger, section: str, stream: str) -> logging.Logger:
    # Handlers, levels and the enabled flag all come from logging.<section>.
    handler = logging.StreamHandler(getattr(sys, stream))
    handler.setFormatter(logging.Formatter(pinvert_params[f"logging.{section}.format"]))

    logger.addHandler(handler)
    logger.setLevel(pinvert_params[f"logging.{section}.level"])
    logger.propagate = False
    logger.disabled = not pinvert_params[f"logging.{section}.enabled"]
    return logger


# @@ CORE LOGGERS @@ #
mylog: logging.Logger = _configure(
    logging.Logger("pinvert"), "mylog", pinvert_params["logging.mylog.stream"]
)
""":py:class:`logging.Logger`: The user facing logger of ``pinvert``.

- ``DEBUG``: The result of each setup stage (relevant region, area, number of intervals).
- ``INFO``: Summary of a finished construction.
- ``WARNING``: Non-fatal numerical problems (clamped u-resolution, unusable tail estimates).
"""
devlog: logging.Logger = _configure(
    logging.Logger("pinvert-dev"), "devlog", pinvert_params["logging.devlog.stream"]
)
""":py:class:`logging.Logger`: The developer logger of ``pinvert``.

The steps of the boundary searches, rejected candidate intervals and inaccurate quadratures are reported
here, so it should only be enabled when debugging a particular density.
"""


class LogDescriptor:
    """
    Class level logger for objects which report on their own construction.

    The logger is named after the owning class and created the first time it is accessed. Its level is
    set by ``logging.code.level``, so that (by default) only warnings and failed constructions of a
    :py:class:`~pinvert.pinv.generator.PINVGenerator` are shown.
    """

    def __get__(self, instance: Instance, owner: Type[Instance]) -> logging.Logger:
        logger = logging.getLogger(owner.__name__)
        if not logger.handlers:
            _configure(logger, "code", pinvert_params["logging.mylog.stream"])
        return logger
