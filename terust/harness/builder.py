# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build one snippet with rustc and turn the outcome into a verdict.

Per item the runner:
  1. un-escapes the HTML entities the feed adds to post text
  2. writes the text to item_<id>.rs in the scratch directory
  3. runs rustc in library mode (snippets rarely have a main) with a fixed
     set of lints allowed, capturing the exit status and stderr
  4. deletes every artifact the build could have left, whatever happened
  5. picks the verdict

Each item gets files keyed by its id, so a build interrupted halfway can't
leave a stale artifact that the next item picks up. Builds are sequential;
neither rustc's output paths nor the scratch directory are shared safely.

There is no shell=True and no argument comes from the snippet itself.
"""

import os
import signal
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Optional

from terust.config.schema import BuildConfig
from terust.harness.cancellation import CancellationController
from terust.harness.errors import CleanupError, SetupError
from terust.harness.models import BuildVerdict, WorkItem
from terust.logging.logger import get_logger
from terust.utils.filesystem import remove_tree, safe_delete
from terust.utils.paths import ensure_directory, validate_path_within

logger = get_logger(__name__)

# Windows reports a process killed by Ctrl-C with this NTSTATUS code,
# either as an unsigned or a signed 32-bit value depending on the caller.
_WINDOWS_CONTROL_C_EXIT: frozenset[int] = frozenset({0xC000013A, 0xC000013A - 2**32})

# Entities the feed escapes in post text. &amp; goes last so "&amp;lt;"
# decodes to the literal "&lt;" the author typed.
_HTML_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
)

_SIBLING_SUFFIXES: tuple[str, ...] = (".pdb", ".exe")


def normalize_text(text: str) -> str:
    """Undo the feed's HTML escaping so rustc sees what the author wrote."""
    for escaped, plain in _HTML_ENTITIES:
        text = text.replace(escaped, plain)
    return text


def killed_by_interrupt(exit_code: int) -> bool:
    """
    Whether the build process died from the same interrupt that cancels the run.

    On POSIX, subprocess reports death by signal N as -N. On Windows, the
    console delivers Ctrl-C to the whole group and the child exits with
    STATUS_CONTROL_C_EXIT.
    """
    if os.name == "nt":
        return exit_code in _WINDOWS_CONTROL_C_EXIT
    return exit_code == -int(signal.SIGINT)


@dataclass(frozen=True)
class CompileResult:
    """What came back from one rustc invocation."""

    exit_code: int
    stdout: str
    stderr: str
    elapsed_seconds: float


@dataclass(frozen=True)
class BuildArtifacts:
    """Every file a build of one item may create."""

    source: Path
    output: Path
    siblings: tuple[Path, ...]

    def all(self) -> tuple[Path, ...]:
        return (self.source, self.output, *self.siblings)


class ScratchArea:
    """
    The per-run scratch directory.

    Recreated empty on enter and removed on exit, on the clean path and the
    cancelled path alike. Unlike the per-item artifacts, any failure here is
    a setup error: there's no sensible run without a working scratch area.

    Usage:
        with ScratchArea(Path(".terust-scratch")) as scratch_dir:
            runner = BuildRunner(config, scratch_dir, controller)
            ...
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def __enter__(self) -> Path:
        try:
            if remove_tree(self._directory):
                logger.info(
                    "Removed stale scratch directory",
                    extra={"path": str(self._directory)},
                )
            ensure_directory(self._directory)
        except OSError as err:
            raise SetupError(
                f"Cannot create scratch directory {self._directory}: {err}"
            ) from err
        logger.debug("Scratch directory ready", extra={"path": str(self._directory)})
        return self._directory

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            remove_tree(self._directory)
        except OSError as err:
            raise SetupError(
                f"Cannot remove scratch directory {self._directory}: {err}"
            ) from err
        logger.debug("Scratch directory removed", extra={"path": str(self._directory)})


class BuildRunner:
    """Turns one WorkItem into a BuildVerdict, leaving no artifacts behind."""

    def __init__(
        self,
        config: BuildConfig,
        scratch_dir: Path,
        controller: CancellationController,
        compiler: Optional[str] = None,
    ) -> None:
        self._config = config
        # Absolute, since rustc runs with the scratch directory as its cwd.
        self._scratch_dir = scratch_dir.resolve()
        self._controller = controller
        self._compiler = compiler or config.compiler

    def artifacts_for(self, item_id: int) -> BuildArtifacts:
        stem = f"item_{item_id}"
        source = self._scratch_dir / f"{stem}.rs"
        output = self._scratch_dir / f"{stem}.rlib"
        siblings = tuple(self._scratch_dir / f"{stem}{suffix}" for suffix in _SIBLING_SUFFIXES)
        for path in (source, output, *siblings):
            validate_path_within(path, self._scratch_dir)
        return BuildArtifacts(source=source, output=output, siblings=siblings)

    def compiler_command(self, item_id: int) -> list[str]:
        artifacts = self.artifacts_for(item_id)
        command = [
            self._compiler,
            "--edition",
            self._config.edition,
            "--crate-type",
            "lib",
            "--crate-name",
            f"item_{item_id}",
        ]
        for lint in self._config.suppressed_lints:
            command.extend(["-A", lint])
        command.extend([str(artifacts.source), "-o", str(artifacts.output)])
        return command

    def build(self, item: WorkItem) -> BuildVerdict:
        artifacts = self.artifacts_for(item.id)

        try:
            try:
                artifacts.source.write_text(normalize_text(item.text), encoding="utf-8")
            except OSError as err:
                raise SetupError(
                    f"Cannot write snippet {item.id} to {artifacts.source}: {err}"
                ) from err
            result = self._invoke_compiler(item.id)
        finally:
            self.cleanup(item.id)

        return self._decide(item, result)

    def cleanup(self, item_id: int) -> None:
        """
        Delete every artifact of one item. Missing files are fine.

        A file that exists but can't be deleted means something else is
        holding the scratch area, so that's fatal, unless we're shutting down
        after an interrupt, where finishing the shutdown matters more.
        """
        for path in self.artifacts_for(item_id).all():
            try:
                safe_delete(path)
            except OSError as err:
                if self._controller.cancelled:
                    logger.warning(
                        "Could not delete build artifact during shutdown",
                        extra={"path": str(path), "error": str(err)},
                    )
                    continue
                raise CleanupError(f"Could not delete build artifact {path}: {err}") from err

    def _invoke_compiler(self, item_id: int) -> CompileResult:
        command = self.compiler_command(item_id)
        timeout = self._config.build_timeout_seconds
        start = time.monotonic()

        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                cwd=str(self._scratch_dir),
            )
        except subprocess.TimeoutExpired:
            elapsed = time.monotonic() - start
            logger.warning(
                "Build timed out",
                extra={"item_id": item_id, "timeout_seconds": timeout},
            )
            return CompileResult(
                exit_code=-1,
                stdout="",
                stderr=f"Build timed out after {timeout}s",
                elapsed_seconds=elapsed,
            )
        except FileNotFoundError:
            elapsed = time.monotonic() - start
            logger.error(
                "Compiler not found",
                extra={"item_id": item_id, "compiler": self._compiler},
            )
            return CompileResult(
                exit_code=-1,
                stdout="",
                stderr=f"{self._compiler} executable not found",
                elapsed_seconds=elapsed,
            )

        elapsed = time.monotonic() - start
        logger.debug(
            "Build finished",
            extra={
                "item_id": item_id,
                "exit_code": completed.returncode,
                "elapsed_seconds": round(elapsed, 3),
            },
        )
        return CompileResult(
            exit_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            elapsed_seconds=elapsed,
        )

    def _decide(self, item: WorkItem, result: CompileResult) -> BuildVerdict:
        # A build that returns after cancellation was requested may have been
        # hit by the same interrupt, so its exit status proves nothing.
        if self._controller.cancelled or killed_by_interrupt(result.exit_code):
            logger.info(
                "Build aborted",
                extra={"item_id": item.id, "exit_code": result.exit_code},
            )
            return BuildVerdict.aborted(result.exit_code, result.elapsed_seconds)
        if result.exit_code == 0:
            return BuildVerdict.passed(result.exit_code, result.elapsed_seconds)
        return BuildVerdict.failed(result.stderr, result.exit_code, result.elapsed_seconds)
