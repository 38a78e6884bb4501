"""Content access service: turns location patterns into readable script handles."""

import functools
import glob
import os
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import requests

from dbinitializer.constants import CLASSPATH_PREFIX, DEFAULT_DOWNLOAD_TIMEOUT, FILE_PREFIX
from dbinitializer.errors import InitializerError
from dbinitializer.errors_catalog import actionable_error
from dbinitializer.models import ScriptHandle


class ContentAccessService:
    """Reads scripts from the filesystem, resource roots and HTTP(S) URLs."""

    MISSING_STATUS_CODES = {404, 410}

    def __init__(
        self,
        logger,
        resource_roots: Optional[Sequence[str]] = None,
        allow_insecure_http: bool = False,
        download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
        requests_module=requests,
    ):
        self.logger = logger
        self.resource_roots = list(resource_roots or [os.getcwd()])
        self.allow_insecure_http = allow_insecure_http
        self.download_timeout = download_timeout
        self.requests = requests_module

    def is_url(self, location: str) -> bool:
        scheme = urlparse(location).scheme.lower()
        return scheme in {"http", "https"}

    def exists(self, location: str) -> bool:
        if self.is_url(location):
            return self._probe_url(location)
        return bool(self._match_files(location))

    def open(self, location: str) -> List[ScriptHandle]:
        if self.is_url(location):
            if not self._probe_url(location):
                return []
            return [ScriptHandle(name=location, opener=functools.partial(self._fetch_url, location))]

        return [
            ScriptHandle(name=path, opener=functools.partial(self._read_file, path))
            for path in self._match_files(location)
        ]

    def _match_files(self, location: str) -> List[str]:
        if location.startswith(CLASSPATH_PREFIX):
            relative = location[len(CLASSPATH_PREFIX):].lstrip("/\\")
            for root in self.resource_roots:
                matches = self._glob_files(os.path.join(root, relative))
                if matches:
                    return matches
            return []

        if location.startswith(FILE_PREFIX):
            location = location[len(FILE_PREFIX):]

        return self._glob_files(os.path.expanduser(location))

    def _glob_files(self, pattern: str) -> List[str]:
        matches = [path for path in glob.glob(pattern, recursive=True) if os.path.isfile(path)]
        self.logger.debug("Pattern %s matched %s file(s)", pattern, len(matches))
        return sorted(matches)

    def _read_file(self, path: str) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as exc:
            raise InitializerError(f"Could not read script '{path}': {exc}") from exc

    def _enforce_https_policy(self, location: str):
        scheme = urlparse(location).scheme.lower()
        if scheme != "http":
            return
        if not self.allow_insecure_http:
            raise InitializerError(actionable_error("insecure_http", location=location))
        self.logger.warning("Insecure HTTP enabled for script location: %s", location)

    def _probe_url(self, location: str) -> bool:
        self._enforce_https_policy(location)

        last_error: Optional[Exception] = None
        for method in ("HEAD", "GET"):
            try:
                response = self.requests.request(
                    method,
                    location,
                    allow_redirects=True,
                    timeout=self.download_timeout,
                    stream=(method == "GET"),
                )
                if response.status_code in self.MISSING_STATUS_CODES:
                    response.close()
                    return False
                response.raise_for_status()
                response.close()
                return True
            except self.requests.RequestException as exc:
                last_error = exc

        self.logger.warning("Script location %s is not reachable: %s", location, last_error)
        return False

    def _fetch_url(self, location: str) -> bytes:
        self.logger.info("Downloading script %s", location)
        try:
            response = self.requests.get(location, timeout=self.download_timeout)
            response.raise_for_status()
        except self.requests.RequestException as exc:
            raise InitializerError(
                actionable_error("remote_unavailable", location=location, reason=exc)
            ) from exc
        return response.content
