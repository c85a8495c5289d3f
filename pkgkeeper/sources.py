"""Work out which package indexes a checkout uses."""

import configparser
import logging
import os
from pathlib import Path
from typing import Sequence

from .models import PackageSources

logger = logging.getLogger(__name__)

PIP_CONFIG_FILES = ("pip.conf", "pip.ini")


class PackageSourcesReader:
    """
    Read package sources, first match wins:

    1. explicit overrides from settings
    2. PIP_INDEX_URL / PIP_EXTRA_INDEX_URL environment variables
    3. a pip.conf or pip.ini at the root of the working folder
    4. the public PyPI index
    """

    def __init__(self, environ: dict[str, str] | None = None):
        self.environ = os.environ if environ is None else environ

    def read(self, working_folder: Path, overrides: Sequence[str] = ()) -> PackageSources:
        if overrides:
            return PackageSources.from_urls(overrides)

        from_env = self._from_environment()
        if from_env:
            return PackageSources.from_urls(from_env)

        from_config = self._from_pip_config(working_folder)
        if from_config:
            return PackageSources.from_urls(from_config)

        return PackageSources.default()

    def _from_environment(self) -> list[str]:
        urls = []
        index_url = self.environ.get("PIP_INDEX_URL", "").strip()
        if index_url:
            urls.append(index_url)
        urls.extend(self.environ.get("PIP_EXTRA_INDEX_URL", "").split())
        return urls

    def _from_pip_config(self, working_folder: Path) -> list[str]:
        for filename in PIP_CONFIG_FILES:
            config_path = working_folder / filename
            if not config_path.is_file():
                continue

            parser = configparser.RawConfigParser()
            try:
                parser.read(config_path, encoding="utf-8")
            except (configparser.Error, UnicodeDecodeError):
                logger.warning("Could not parse %s", config_path, exc_info=True)
                continue

            urls = []
            index_url = parser.get("global", "index-url", fallback="").strip()
            if index_url:
                urls.append(index_url)
            urls.extend(parser.get("global", "extra-index-url", fallback="").split())
            if urls:
                return urls

        return []
