# src/pagescope/core/utils/path_utils.py
from pathlib import Path


class PathUtils:
    """
    A central utility for reliably retrieving important project paths.
    """

    @staticmethod
    def get_package_root() -> Path:
        """
        Returns the directory of the 'pagescope' package (where settings.json lives).
        Resolved relative to this file so it also works from an installed wheel.
        """
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_package_root() / "settings.json"
