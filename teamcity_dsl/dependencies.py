"""DSL-library dependencies for a TeamCity version and their download cache."""

from __future__ import annotations

import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Sequence

import httpx
import pooch
from platformdirs import PlatformDirs

from .console import log, log_error
from .constants import (
    CACHE_ENV_VAR,
    DEFAULT_CACHE_DIR_NAME,
    DEFAULT_KOTLIN_VERSION,
    DEFAULT_REPOSITORIES,
    DSL_PLUGIN_ARTIFACTS,
    DSL_PLUGIN_VERSION,
    HTTP_TIMEOUT_SECONDS,
)
from .errors import CLIError
from .http import default_http_client, describe_http_error


@dataclass(frozen=True)
class Coordinate:
    """Maven coordinate of one DSL library (``group:artifact:version[@ext]``)."""

    group: str
    artifact: str
    version: str
    extension: str = "jar"

    @classmethod
    def parse(cls, notation: str) -> "Coordinate":
        value = (notation or "").strip()
        extension = "jar"
        if "@" in value:
            value, extension = value.rsplit("@", 1)
        parts = value.split(":")
        if len(parts) != 3 or not all(part.strip() for part in parts) or not extension:
            raise CLIError(
                f"invalid dependency notation {notation!r}; expected group:artifact:version[@ext]"
            )
        group, artifact, version = (part.strip() for part in parts)
        return cls(group, artifact, version, extension.strip())

    @property
    def filename(self) -> str:
        return f"{self.artifact}-{self.version}.{self.extension}"

    @property
    def path(self) -> str:
        return "/".join([*self.group.split("."), self.artifact, self.version, self.filename])

    def __str__(self) -> str:
        notation = f"{self.group}:{self.artifact}:{self.version}"
        if self.extension != "jar":
            notation = f"{notation}@{self.extension}"
        return notation


def default_dependencies(
    teamcity_version: str,
    kotlin_version: str = DEFAULT_KOTLIN_VERSION,
) -> List[Coordinate]:
    """The libraries the DSL generator needs for ``teamcity_version``."""
    coordinates = [
        Coordinate("org.jetbrains.kotlin", "kotlin-stdlib", kotlin_version),
        Coordinate("org.jetbrains.kotlin", "kotlin-compiler-embeddable", kotlin_version),
        Coordinate("org.jetbrains.teamcity", "server-api", teamcity_version),
        Coordinate("org.jetbrains.teamcity.internal", "server", teamcity_version),
        Coordinate("org.jetbrains.teamcity", "configs-dsl-server", teamcity_version),
        Coordinate("org.jetbrains.teamcity", "configs-dsl-kotlin", teamcity_version),
    ]
    coordinates.extend(
        Coordinate("org.jetbrains.teamcity", artifact, DSL_PLUGIN_VERSION)
        for artifact in DSL_PLUGIN_ARTIFACTS
    )
    return coordinates


def cache_root(*, create: bool = True) -> Path:
    explicit = os.environ.get(CACHE_ENV_VAR)
    if explicit:
        root = Path(explicit).expanduser()
    else:
        dirs = PlatformDirs(appname=DEFAULT_CACHE_DIR_NAME, appauthor=False)
        root = Path(dirs.user_cache_path)
    if create:
        root.mkdir(parents=True, exist_ok=True)
    return root


def artifact_cache_dir(*, create: bool = True) -> Path:
    path = cache_root(create=create) / "artifacts"
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


def cached_artifact_path(coordinate: Coordinate) -> Path:
    return artifact_cache_dir(create=False).joinpath(*coordinate.path.split("/"))


_CACHE_LOCK_FILENAME = ".teamcity_dsl_cache.lock"


@contextmanager
def cache_lock(*, timeout_seconds: float = 60.0, stale_after_seconds: float = 2 * 60 * 60) -> Iterator[None]:
    """Coarse cross-process lock for artifact downloads (atomic ``O_EXCL`` create)."""
    lock_path = cache_root() / _CACHE_LOCK_FILENAME
    started = time.monotonic()
    while True:
        try:
            fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            break
        except FileExistsError:
            try:
                age = time.time() - lock_path.stat().st_mtime
            except FileNotFoundError:
                continue
            if age >= stale_after_seconds:
                try:
                    lock_path.unlink()
                except OSError:
                    pass
                continue
            if (time.monotonic() - started) >= timeout_seconds:
                raise CLIError(
                    f"timed out waiting for cache lock: {lock_path} (waited {timeout_seconds:.1f}s)"
                ) from None
            time.sleep(0.2)
    try:
        os.write(fd, f"pid={os.getpid()}\n".encode("utf-8"))
        yield
    finally:
        os.close(fd)
        try:
            lock_path.unlink()
        except FileNotFoundError:
            pass


class HTTPXDownloader:
    """Pooch downloader that uses httpx for transfers and retries transient errors."""

    def __init__(
        self,
        timeout: float,
        *,
        max_attempts: int = 3,
        backoff_initial: float = 0.5,
        backoff_max: float = 8.0,
        sleep: Callable[[float], None] = time.sleep,
        client_factory: Optional[Callable[[httpx.Timeout], httpx.Client]] = None,
    ) -> None:
        self.timeout = timeout
        self.max_attempts = max(1, int(max_attempts))
        self.backoff_initial = max(0.0, float(backoff_initial))
        self.backoff_max = max(self.backoff_initial, float(backoff_max))
        self.sleep = sleep
        self.client_factory = client_factory or default_http_client

    def _should_retry(self, exc: httpx.HTTPError) -> bool:
        if isinstance(exc, httpx.HTTPStatusError):
            return exc.response.status_code in {408, 429, 500, 502, 503, 504}
        return isinstance(exc, (httpx.TimeoutException, httpx.RequestError))

    def _retry_delay(self, attempt: int) -> float:
        delay = self.backoff_initial * (2 ** (attempt - 1))
        return min(delay, self.backoff_max)

    def __call__(
        self,
        url: str,
        output_file: str,
        pooch_obj: Any = None,
        check_only: bool = False,
        **_: Any,
    ) -> None:
        timeout = httpx.Timeout(self.timeout, connect=self.timeout)
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        attempt = 0
        while True:
            attempt += 1
            try:
                with self.client_factory(timeout) as client:
                    if check_only:
                        client.head(url).raise_for_status()
                        return
                    with client.stream("GET", url) as response:
                        response.raise_for_status()
                        with output_path.open("wb") as fh:
                            for chunk in response.iter_bytes(chunk_size=1024 * 64):
                                if chunk:
                                    fh.write(chunk)
                    return
            except httpx.HTTPError as exc:
                detail = describe_http_error(exc)
                if attempt >= self.max_attempts or not self._should_retry(exc):
                    raise CLIError(
                        f"download failed for {url} after {attempt} attempt(s): {detail}"
                    ) from exc
                delay = self._retry_delay(attempt)
                log_error(
                    f"download error for {url}: {detail}; retrying in {delay:.1f}s"
                    f" ({attempt + 1}/{self.max_attempts})"
                )
                if delay > 0:
                    self.sleep(delay)
            except OSError as exc:
                raise CLIError(f"failed to write download file {output_path}: {exc}") from exc


HTTPX_DOWNLOADER = HTTPXDownloader(timeout=HTTP_TIMEOUT_SECONDS)


def resolve_artifact(
    coordinate: Coordinate,
    repositories: Sequence[str],
    *,
    downloader: Optional[Callable[..., None]] = None,
) -> Path:
    """Return the cached artifact, downloading it from the first repository that has it."""
    target = cached_artifact_path(coordinate)
    if target.is_file():
        return target
    failures: List[str] = []
    for repository in repositories:
        url = f"{repository.rstrip('/')}/{coordinate.path}"
        try:
            return Path(
                pooch.retrieve(
                    url=url,
                    known_hash=None,
                    fname=target.name,
                    path=target.parent,
                    downloader=downloader or HTTPX_DOWNLOADER,
                    progressbar=False,
                )
            )
        except CLIError as exc:
            failures.append(str(exc))
    detail = "; ".join(failures) if failures else "no repositories configured"
    raise CLIError(f"unable to resolve {coordinate}: {detail}")


def resolve_dependencies(
    coordinates: Sequence[Coordinate],
    repositories: Sequence[str] = tuple(DEFAULT_REPOSITORIES),
    *,
    downloader: Optional[Callable[..., None]] = None,
) -> List[Path]:
    """Resolve every coordinate to a local file, preserving order."""
    artifact_cache_dir()
    with cache_lock():
        paths = [
            resolve_artifact(coordinate, repositories, downloader=downloader)
            for coordinate in coordinates
        ]
    log(f"resolved {len(paths)} DSL libraries")
    return paths
