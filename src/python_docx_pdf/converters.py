"""
PDF converters driving office suites installed on the local system.

A converter turns a document file on disk into PDF bytes by running an
external program. The program is located once, when the converter is built:

1. An explicit ``binary`` setting
2. The converter's environment variable (``LIBREOFFICE_PATH``, ``UNOCONV_PATH``)
3. Default installation paths
4. System PATH

Usage:
    from python_docx_pdf.converters import LibreOfficeConverter

    converter = LibreOfficeConverter()
    pdf = converter.convert("invoice.docx")
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConversionError

logger = logging.getLogger(__name__)

# Environment variable names for tool path overrides
LIBREOFFICE_PATH_ENV = "LIBREOFFICE_PATH"
UNOCONV_PATH_ENV = "UNOCONV_PATH"

DEFAULT_TIMEOUT = 120

# Default search locations for LibreOffice
LIBREOFFICE_DEFAULT_PATHS = [
    # macOS
    "/Applications/LibreOffice.app/Contents/MacOS/soffice",
    # Linux common locations
    "/usr/bin/soffice",
    "/usr/bin/libreoffice",
    "/usr/local/bin/soffice",
    "/usr/local/bin/libreoffice",
    # Windows
    r"C:\Program Files\LibreOffice\program\soffice.exe",
    r"C:\Program Files (x86)\LibreOffice\program\soffice.exe",
]

# Default search locations for unoconv
UNOCONV_DEFAULT_PATHS = [
    "/usr/bin/unoconv",
    "/usr/local/bin/unoconv",
    "/opt/homebrew/bin/unoconv",
]

# LibreOffice export filters; HTML opens in Writer/Web, which has its own
DOCX_EXPORT_FILTER = "pdf:writer_pdf_Export"
HTML_EXPORT_FILTER = "pdf:writer_web_pdf_Export"
HTML_SUFFIXES = (".html", ".htm")

# unoconv fails its first run against a fresh profile with this message
UNOCONV_RETRY_MARKER = "Unable to connect"


@dataclass
class ConverterSettings:
    """Configuration for an external converter.

    Attributes:
        binary: Path to the converter executable (None to discover it)
        profile_dir: Directory used as the office suite's user profile
            (None for a fresh temporary directory per conversion)
        timeout: Seconds to wait for one conversion
        extra_args: Additional command-line arguments
    """

    binary: str | None = None
    profile_dir: Path | None = None
    timeout: int = DEFAULT_TIMEOUT
    extra_args: list[str] = field(default_factory=list)


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_executable(env_var: str, default_paths: list[str], commands: list[str]) -> str | None:
    """Find an executable.

    Search order:
    1. The environment variable
    2. Default installation paths
    3. System PATH

    Returns:
        Path to the executable, or None if not found
    """
    env_path = os.environ.get(env_var)
    if env_path:
        if _is_executable(env_path):
            logger.debug("Found %s (from %s)", env_path, env_var)
            return env_path
        logger.warning("%s is set to %s but file is not executable", env_var, env_path)

    for path in default_paths:
        if _is_executable(path):
            logger.debug("Found %s", path)
            return path

    for cmd in commands:
        which_result = shutil.which(cmd)
        if which_result:
            logger.debug("Found %s (from PATH)", which_result)
            return which_result

    return None


class Converter(ABC):
    """Turns a document file into PDF bytes."""

    #: Environment variable that overrides binary discovery
    env_var: str = ""
    default_paths: list[str] = []
    commands: list[str] = []
    install_hint: str = ""

    def __init__(self, settings: ConverterSettings | None = None) -> None:
        """Resolve and validate the converter binary.

        Args:
            settings: Converter configuration (defaults if omitted)

        Raises:
            ConversionError: If the binary cannot be found or is not executable
        """
        self.settings = settings or ConverterSettings()
        self.binary = self._resolve_binary()

    def _resolve_binary(self) -> str:
        configured = self.settings.binary
        if configured:
            if not _is_executable(configured):
                raise ConversionError(
                    f"The {self.name} command ({configured!r}) was not found "
                    "or is not executable by the current user"
                )
            return configured

        found = find_executable(self.env_var, self.default_paths, self.commands)
        if found is None:
            raise ConversionError(
                f"{self.name} is not available. {self.install_hint}\n"
                f"Or set {self.env_var} environment variable."
            )
        return found

    @property
    def name(self) -> str:
        return type(self).__name__.removesuffix("Converter")

    def _check_profile_dir(self) -> None:
        profile = self.settings.profile_dir
        if profile is not None and profile.is_dir() and not os.access(profile, os.W_OK):
            raise ConversionError(
                f"The {self.name} user profile directory ({profile}) is not writable; "
                "the conversion would fail"
            )

    def _run(
        self, command: list[str], env: dict[str, str] | None = None
    ) -> subprocess.CompletedProcess:
        """Run a converter command, mapping launch failures to ConversionError."""
        logger.debug("Running %s", " ".join(command))
        try:
            return subprocess.run(
                command,
                capture_output=True,
                timeout=self.settings.timeout,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            raise ConversionError(
                f"{self.name} conversion timed out after {self.settings.timeout} seconds",
                command=command,
            ) from e
        except OSError as e:
            raise ConversionError(f"Failed to run {self.name}: {e}", command=command) from e

    @staticmethod
    def _stderr(result: subprocess.CompletedProcess) -> str:
        return (result.stderr or b"").decode("utf-8", errors="replace")

    def convert(self, path: str | Path) -> bytes:
        """Convert a document to PDF.

        Args:
            path: Path to the document to convert

        Returns:
            The PDF bytes

        Raises:
            ConversionError: If the document is missing or the conversion fails
        """
        path = Path(path)
        if not path.is_file():
            raise ConversionError(f"Document to convert not found: {path}")
        self._check_profile_dir()

        if self.settings.profile_dir is not None:
            return self._convert(path, self.settings.profile_dir)
        with tempfile.TemporaryDirectory(prefix="docx_pdf_profile_") as profile:
            return self._convert(path, Path(profile))

    @abstractmethod
    def _convert(self, path: Path, profile_dir: Path) -> bytes:
        """Run the conversion with the given user profile directory."""


class LibreOfficeConverter(Converter):
    """Converts documents with LibreOffice in headless mode.

    LibreOffice cannot write to stdout, so the PDF is written to a temporary
    output directory and read back.
    """

    env_var = LIBREOFFICE_PATH_ENV
    default_paths = LIBREOFFICE_DEFAULT_PATHS
    commands = ["soffice", "libreoffice"]
    install_hint = (
        "Install LibreOffice to enable PDF conversion:\n"
        "  macOS: brew install --cask libreoffice\n"
        "  Linux: sudo apt install libreoffice\n"
        "  Windows: Download from https://www.libreoffice.org/download/"
    )

    def _convert(self, path: Path, profile_dir: Path) -> bytes:
        export_filter = (
            HTML_EXPORT_FILTER if path.suffix.lower() in HTML_SUFFIXES else DOCX_EXPORT_FILTER
        )
        with tempfile.TemporaryDirectory(prefix="docx_pdf_out_") as output:
            output_dir = Path(output)
            command = [
                self.binary,
                "--headless",
                f"-env:UserInstallation={profile_dir.absolute().as_uri()}",
                "--convert-to",
                export_filter,
                "--outdir",
                str(output_dir),
                *self.settings.extra_args,
                str(path.absolute()),
            ]
            result = self._run(command)
            if result.returncode != 0:
                raise ConversionError(
                    f"LibreOffice conversion failed (exit code {result.returncode}):\n"
                    f"{self._stderr(result)}",
                    command=command,
                    returncode=result.returncode,
                    stderr=self._stderr(result),
                )

            pdf_path = output_dir / f"{path.stem}.pdf"
            if not pdf_path.exists():
                raise ConversionError(
                    f"LibreOffice did not generate PDF file. Expected: {pdf_path}",
                    command=command,
                    returncode=result.returncode,
                    stderr=self._stderr(result),
                )

            logger.debug("PDF generated at %s", pdf_path)
            return pdf_path.read_bytes()


class UnoconvConverter(Converter):
    """Converts documents with unoconv, reading the PDF from its stdout.

    The user profile directory doubles as ``HOME`` for the unoconv process.
    A first run that fails to connect to the office listener is retried once.
    """

    env_var = UNOCONV_PATH_ENV
    default_paths = UNOCONV_DEFAULT_PATHS
    commands = ["unoconv"]
    install_hint = (
        "Install unoconv to enable PDF conversion:\n"
        "  Linux: sudo apt install unoconv\n"
        "  macOS: brew install unoconv"
    )

    def _convert(self, path: Path, profile_dir: Path) -> bytes:
        command = [
            self.binary,
            "--stdout",
            "-f",
            "pdf",
            *self.settings.extra_args,
            str(path.absolute()),
        ]
        env = {**os.environ, "HOME": str(profile_dir)}

        result = self._run(command, env=env)
        if result.returncode != 0 and UNOCONV_RETRY_MARKER in self._stderr(result):
            logger.debug("unoconv could not connect on first run, retrying")
            result = self._run(command, env=env)

        if result.returncode != 0:
            raise ConversionError(
                f"unoconv conversion failed (exit code {result.returncode}):\n"
                f"{self._stderr(result)}",
                command=command,
                returncode=result.returncode,
                stderr=self._stderr(result),
            )
        return result.stdout


CONVERTERS: dict[str, type[Converter]] = {
    "libreoffice": LibreOfficeConverter,
    "unoconv": UnoconvConverter,
}


def get_converter(
    name: str = "libreoffice", settings: ConverterSettings | None = None
) -> Converter:
    """Build a converter by name ("libreoffice" or "unoconv").

    Raises:
        ConversionError: If the name is unknown or the binary is unavailable
    """
    try:
        converter_class = CONVERTERS[name.lower()]
    except KeyError:
        raise ConversionError(
            f"Unknown converter {name!r}; choose one of: {', '.join(CONVERTERS)}"
        ) from None
    return converter_class(settings)
