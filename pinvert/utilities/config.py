"""
Configuration management for pinvert.

The configuration of the package lives in ``pinvert/bin/config.yaml``. It is loaded once on import
into :py:attr:`pinvert_params`, which provides dotted-key access to nested settings:

>>> from pinvert.utilities.config import pinvert_params
>>> pinvert_params["generator.order"]
5

Settings may be overridden at runtime (for the current session only) by assigning to the same keys.
"""
import os
from pathlib import Path
from typing import Any, Union

from ruamel.yaml import YAML

# @@ CONFIGURATION LOCATION @@ #
# The configuration directory is the /bin directory of the package. All
# YAML configuration files shipped with pinvert are stored here.
config_directory: str = os.path.join(Path(__file__).parents[1], "bin")
""" str: The directory containing the pinvert configuration files."""

_yaml = YAML(typ="safe")


class YAMLConfig:
    """
    Dotted-key access to a YAML configuration file.

    Parameters
    ----------
    path : str or Path
        The path to the YAML file.

    Notes
    -----
    Keys are addressed with ``.`` separated paths through the nested mappings of the file, so that
    ``config["logging.mylog.level"]`` corresponds to

    .. code-block:: yaml

        logging:
          mylog:
            level: INFO

    Values set through :py:meth:`__setitem__` are held in memory and are not written back to disk.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

        if not self.path.exists():
            raise FileNotFoundError(f"Configuration file {self.path} does not exist.")

        with open(self.path, "r", encoding="utf-8") as fio:
            self._data = _yaml.load(fio) or {}

    def __getitem__(self, key: str) -> Any:
        _value = self._data
        for _k in key.split("."):
            try:
                _value = _value[_k]
            except (KeyError, TypeError):
                raise KeyError(f"Key '{key}' is not present in configuration {self.path}.")
        return _value

    def __setitem__(self, key: str, value: Any):
        *_parents, _leaf = key.split(".")
        _node = self._data
        for _k in _parents:
            _node = _node.setdefault(_k, {})
            if not isinstance(_node, dict):
                raise KeyError(f"Cannot set '{key}': '{_k}' is not a section of {self.path}.")
        _node[_leaf] = value

    def __contains__(self, key: str) -> bool:
        try:
            self[key]
        except KeyError:
            return False
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """Fetch ``key`` from the configuration, returning ``default`` if it is not present."""
        try:
            return self[key]
        except KeyError:
            return default

    def reload(self):
        """Discard runtime overrides and reload the file from disk."""
        with open(self.path, "r", encoding="utf-8") as fio:
            self._data = _yaml.load(fio) or {}

    def __repr__(self):
        return f"<YAMLConfig: {self.path}>"


pinvert_params: YAMLConfig = YAMLConfig(os.path.join(config_directory, "config.yaml"))
""" YAMLConfig: The global configuration settings for pinvert."""
