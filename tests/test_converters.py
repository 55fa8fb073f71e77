"""Tests for the external PDF converters."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from python_docx_pdf.converters import (
    LIBREOFFICE_PATH_ENV,
    UNOCONV_PATH_ENV,
    ConverterSettings,
    LibreOfficeConverter,
    UnoconvConverter,
    find_executable,
    get_converter,
)
from python_docx_pdf.errors import ConversionError


def make_executable(path: Path) -> Path:
    path.write_text("#!/bin/sh\necho mock\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def soffice(tmp_path: Path) -> Path:
    return make_executable(tmp_path / "soffice")


@pytest.fixture
def unoconv(tmp_path: Path) -> Path:
    return make_executable(tmp_path / "unoconv")


@pytest.fixture
def document(tmp_path: Path) -> Path:
    path = tmp_path / "invoice.docx"
    path.write_bytes(b"PK fake docx")
    return path


def write_pdf_to_outdir(command, **kwargs):
    """subprocess.run stand-in that behaves like a successful soffice run."""
    outdir = Path(command[command.index("--outdir") + 1])
    source = Path(command[-1])
    (outdir / f"{source.stem}.pdf").write_bytes(b"%PDF-1.4 converted")
    return subprocess.CompletedProcess(command, 0, stdout=b"", stderr=b"")


class TestDiscovery:
    """Tests for converter binary discovery."""

    def test_env_var_wins(self, soffice: Path) -> None:
        with patch.dict("os.environ", {LIBREOFFICE_PATH_ENV: str(soffice)}):
            converter = LibreOfficeConverter()

        assert converter.binary == str(soffice)

    def test_explicit_binary_wins_over_env(self, soffice: Path, tmp_path: Path) -> None:
        other = make_executable(tmp_path / "other-soffice")

        with patch.dict("os.environ", {LIBREOFFICE_PATH_ENV: str(soffice)}):
            converter = LibreOfficeConverter(ConverterSettings(binary=str(other)))

        assert converter.binary == str(other)

    def test_explicit_binary_not_executable(self, tmp_path: Path) -> None:
        plain = tmp_path / "soffice"
        plain.write_text("not executable")

        with pytest.raises(ConversionError, match="not executable"):
            LibreOfficeConverter(ConverterSettings(binary=str(plain)))

    def test_non_executable_env_falls_through(self, tmp_path: Path) -> None:
        """Test an unusable env path is skipped for the default paths and PATH."""
        plain = tmp_path / "unoconv"
        plain.write_text("not executable")

        with (
            patch.dict("os.environ", {UNOCONV_PATH_ENV: str(plain)}),
            patch("python_docx_pdf.converters.shutil.which", return_value="/opt/bin/unoconv"),
        ):
            found = find_executable(UNOCONV_PATH_ENV, [], ["unoconv"])

        assert found == "/opt/bin/unoconv"

    def test_not_found_raises(self) -> None:
        with (
            patch.dict("os.environ", {}, clear=True),
            patch.object(LibreOfficeConverter, "default_paths", []),
            patch("python_docx_pdf.converters.shutil.which", return_value=None),
        ):
            with pytest.raises(ConversionError) as exc_info:
                LibreOfficeConverter()

        assert LIBREOFFICE_PATH_ENV in str(exc_info.value)

    def test_get_converter(self, unoconv: Path) -> None:
        converter = get_converter("Unoconv", ConverterSettings(binary=str(unoconv)))

        assert isinstance(converter, UnoconvConverter)
        assert converter.name == "Unoconv"

    def test_get_unknown_converter(self) -> None:
        with pytest.raises(ConversionError, match="Unknown converter"):
            get_converter("google")


class TestLibreOfficeConverter:
    """Tests for LibreOfficeConverter.convert."""

    def test_convert(self, soffice: Path, document: Path) -> None:
        converter = LibreOfficeConverter(ConverterSettings(binary=str(soffice), timeout=30))

        with patch("subprocess.run", side_effect=write_pdf_to_outdir) as mock_run:
            pdf = converter.convert(document)

        assert pdf == b"%PDF-1.4 converted"
        command = mock_run.call_args.args[0]
        assert command[0] == str(soffice)
        assert "--headless" in command
        assert "pdf:writer_pdf_Export" in command
        assert any(arg.startswith("-env:UserInstallation=file://") for arg in command)
        assert command[-1] == str(document.absolute())
        assert mock_run.call_args.kwargs["timeout"] == 30

    def test_html_uses_web_filter(self, soffice: Path, tmp_path: Path) -> None:
        page = tmp_path / "page.html"
        page.write_text("<!DOCTYPE html><p>x</p>")
        converter = LibreOfficeConverter(ConverterSettings(binary=str(soffice)))

        with patch("subprocess.run", side_effect=write_pdf_to_outdir) as mock_run:
            converter.convert(page)

        assert "pdf:writer_web_pdf_Export" in mock_run.call_args.args[0]

    def test_profile_dir_used(self, soffice: Path, document: Path, tmp_path: Path) -> None:
        profile = tmp_path / "profile"
        profile.mkdir()
        settings = ConverterSettings(binary=str(soffice), profile_dir=profile)

        with patch("subprocess.run", side_effect=write_pdf_to_outdir) as mock_run:
            LibreOfficeConverter(settings).convert(document)

        assert f"-env:UserInstallation={profile.absolute().as_uri()}" in mock_run.call_args.args[0]

    def test_extra_args(self, soffice: Path, document: Path) -> None:
        settings = ConverterSettings(binary=str(soffice), extra_args=["--norestore"])

        with patch("subprocess.run", side_effect=write_pdf_to_outdir) as mock_run:
            LibreOfficeConverter(settings).convert(document)

        assert "--norestore" in mock_run.call_args.args[0]

    def test_failure(self, soffice: Path, document: Path) -> None:
        failed = subprocess.CompletedProcess(
            [], 1, stdout=b"", stderr=b"source file could not be loaded"
        )
        converter = LibreOfficeConverter(ConverterSettings(binary=str(soffice)))

        with patch("subprocess.run", return_value=failed):
            with pytest.raises(ConversionError) as exc_info:
                converter.convert(document)

        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr == "source file could not be loaded"
        assert "exit code 1" in str(exc_info.value)

    def test_missing_output(self, soffice: Path, document: Path) -> None:
        done = subprocess.CompletedProcess([], 0, stdout=b"", stderr=b"")
        converter = LibreOfficeConverter(ConverterSettings(binary=str(soffice)))

        with patch("subprocess.run", return_value=done):
            with pytest.raises(ConversionError, match="did not generate PDF"):
                converter.convert(document)

    def test_timeout(self, soffice: Path, document: Path) -> None:
        converter = LibreOfficeConverter(ConverterSettings(binary=str(soffice), timeout=5))

        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("soffice", 5)):
            with pytest.raises(ConversionError, match="timed out after 5 seconds"):
                converter.convert(document)

    def test_missing_document(self, soffice: Path, tmp_path: Path) -> None:
        converter = LibreOfficeConverter(ConverterSettings(binary=str(soffice)))

        with pytest.raises(ConversionError, match="not found"):
            converter.convert(tmp_path / "missing.docx")


class TestUnoconvConverter:
    """Tests for UnoconvConverter.convert."""

    def test_convert_reads_stdout(self, unoconv: Path, document: Path) -> None:
        done = subprocess.CompletedProcess([], 0, stdout=b"%PDF-1.4 stdout", stderr=b"")
        converter = UnoconvConverter(ConverterSettings(binary=str(unoconv)))

        with patch("subprocess.run", return_value=done) as mock_run:
            pdf = converter.convert(document)

        assert pdf == b"%PDF-1.4 stdout"
        command = mock_run.call_args.args[0]
        assert command[:4] == [str(unoconv), "--stdout", "-f", "pdf"]
        assert mock_run.call_args.kwargs["env"]["HOME"]

    def test_home_is_profile_dir(self, unoconv: Path, document: Path, tmp_path: Path) -> None:
        profile = tmp_path / "home"
        profile.mkdir()
        done = subprocess.CompletedProcess([], 0, stdout=b"%PDF", stderr=b"")
        converter = UnoconvConverter(ConverterSettings(binary=str(unoconv), profile_dir=profile))

        with patch("subprocess.run", return_value=done) as mock_run:
            converter.convert(document)

        assert mock_run.call_args.kwargs["env"]["HOME"] == str(profile)

    def test_retries_once_on_connect_failure(self, unoconv: Path, document: Path) -> None:
        """Test a first-run listener failure is retried."""
        results = [
            subprocess.CompletedProcess(
                [], 1, stdout=b"", stderr=b"Error: Unable to connect or start own listener"
            ),
            subprocess.CompletedProcess([], 0, stdout=b"%PDF-1.4 second", stderr=b""),
        ]
        converter = UnoconvConverter(ConverterSettings(binary=str(unoconv)))

        with patch("subprocess.run", side_effect=results) as mock_run:
            pdf = converter.convert(document)

        assert pdf == b"%PDF-1.4 second"
        assert mock_run.call_count == 2

    def test_other_failure_not_retried(self, unoconv: Path, document: Path) -> None:
        failed = subprocess.CompletedProcess([], 2, stdout=b"", stderr=b"Unsupported format")
        converter = UnoconvConverter(ConverterSettings(binary=str(unoconv)))

        with patch("subprocess.run", return_value=failed) as mock_run:
            with pytest.raises(ConversionError, match="Unsupported format"):
                converter.convert(document)

        assert mock_run.call_count == 1

    def test_retry_failure_raises(self, unoconv: Path, document: Path) -> None:
        failed = subprocess.CompletedProcess([], 1, stdout=b"", stderr=b"Error: Unable to connect")
        converter = UnoconvConverter(ConverterSettings(binary=str(unoconv)))

        with patch("subprocess.run", return_value=failed) as mock_run:
            with pytest.raises(ConversionError):
                converter.convert(document)

        assert mock_run.call_count == 2
