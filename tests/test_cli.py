"""Tests for CLI commands - download, upload, probe, token, configure."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from chunkgate.client.cli import cli

URL = "http://test/files/data.bin"
GATEWAY = "http://gw.test"


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def config_dir(tmp_path: Path) -> Iterator[Path]:
    """Point the CLI config at a temporary directory."""
    config = tmp_path / ".chunkgate"
    with patch("chunkgate.client.cli.config.get_config_dir", return_value=config):
        yield config
    # Handlers bound to the runner's stderr must not outlive the test
    logging.getLogger("chunkgate").handlers.clear()


class TestDownloadCommand:
    """Tests for 'chunkgate download'."""

    def test_download(self, runner: CliRunner, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should fetch the resource in one range and report the size."""
        httpx_mock.add_response(
            url=URL,
            method="HEAD",
            headers={"Content-Length": "11", "Accept-Ranges": "bytes"},
        )
        httpx_mock.add_response(
            url=URL,
            method="GET",
            match_headers={"Range": "bytes=0-10"},
            status_code=206,
            headers={"Content-Range": "bytes 0-10/11"},
            content=b"hello world",
        )
        output = tmp_path / "data.bin"

        result = runner.invoke(cli, ["download", URL, str(output), "--no-progress"])

        assert result.exit_code == 0, result.output
        assert output.read_bytes() == b"hello world"
        assert "Downloaded 11 bytes" in result.output

    def test_download_uses_saved_token(
        self, runner: CliRunner, tmp_path: Path, config_dir: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """The token saved by configure is sent when --token is absent."""
        config_dir.mkdir()
        (config_dir / "config.json").write_text(json.dumps({"auth_token": "saved"}))
        httpx_mock.add_response(
            url=URL,
            method="HEAD",
            match_headers={"AuthToken": "saved"},
            headers={"Content-Length": "0", "Accept-Ranges": "bytes"},
        )

        result = runner.invoke(
            cli, ["download", URL, str(tmp_path / "empty.bin"), "--no-progress"]
        )

        assert result.exit_code == 0, result.output

    def test_download_without_range_support_fails(
        self, runner: CliRunner, tmp_path: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """A server without byte ranges exits with status 1."""
        httpx_mock.add_response(
            url=URL,
            method="HEAD",
            headers={"Content-Length": "11", "Accept-Ranges": "none"},
        )

        result = runner.invoke(cli, ["download", URL, str(tmp_path / "x.bin")])

        assert result.exit_code == 1
        assert "Error" in result.output


class TestUploadCommand:
    """Tests for 'chunkgate upload'."""

    def test_upload_prints_remote_id(
        self, runner: CliRunner, tmp_path: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Should send the file and print the id the gateway assigns."""
        source = tmp_path / "notes.txt"
        source.write_bytes(b"some notes")
        httpx_mock.add_response(
            url=f"{GATEWAY}/v1/addLargeFile",
            method="POST",
            match_headers={"FileStartIndex": "0", "FileSize": "10", "AuthToken": "tok"},
            json={"code": 200, "message": "ok", "fileIndex": 10, "id": "QmNotes"},
        )

        result = runner.invoke(
            cli,
            ["upload", str(source), "--gateway", GATEWAY, "--token", "tok", "--no-progress"],
        )

        assert result.exit_code == 0, result.output
        assert "QmNotes" in result.output

    def test_upload_requires_gateway(self, runner: CliRunner, tmp_path: Path) -> None:
        """Without a gateway URL the command fails before any request."""
        source = tmp_path / "notes.txt"
        source.write_bytes(b"x")

        result = runner.invoke(cli, ["upload", str(source)])

        assert result.exit_code == 1
        assert "No gateway URL" in result.output

    def test_upload_rejects_negative_max_resyncs(
        self, runner: CliRunner, tmp_path: Path
    ) -> None:
        """--max-resyncs must not be negative."""
        source = tmp_path / "notes.txt"
        source.write_bytes(b"x")

        result = runner.invoke(
            cli, ["upload", str(source), "--gateway", GATEWAY, "--max-resyncs", "-1"]
        )

        assert result.exit_code == 2

    def test_upload_rejected(
        self, runner: CliRunner, tmp_path: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """A fatal gateway code exits with status 1."""
        source = tmp_path / "notes.txt"
        source.write_bytes(b"x")
        httpx_mock.add_response(
            url=f"{GATEWAY}/v1/addLargeFile",
            method="POST",
            json={"code": 403, "message": "token expired", "fileIndex": 0},
        )

        result = runner.invoke(cli, ["upload", str(source), "--gateway", GATEWAY])

        assert result.exit_code == 1
        assert "token expired" in result.output


class TestProbeCommand:
    """Tests for 'chunkgate probe'."""

    def test_probe(self, runner: CliRunner, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should print size and range support."""
        httpx_mock.add_response(
            url=URL,
            method="HEAD",
            headers={"Content-Length": "2048", "Accept-Ranges": "bytes"},
        )

        result = runner.invoke(cli, ["probe", URL])

        assert result.exit_code == 0, result.output
        assert "Size: 2048 bytes" in result.output
        assert "Range requests: yes" in result.output

    def test_probe_failure(self, runner: CliRunner, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A failing probe exits with status 1."""
        httpx_mock.add_response(url=URL, method="HEAD", status_code=404)

        result = runner.invoke(cli, ["probe", URL])

        assert result.exit_code == 1


class TestTokenCommands:
    """Tests for 'chunkgate token' and 'chunkgate configure'."""

    def test_token_save(
        self, runner: CliRunner, config_dir: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """--save stores the gateway and the issued token."""
        httpx_mock.add_response(
            url=f"{GATEWAY}/u/createToken",
            method="POST",
            json={"code": 200, "message": "ok", "data": "fresh-token"},
        )

        result = runner.invoke(
            cli,
            ["token", "--gateway", GATEWAY, "--account", "alice", "--api-key", "k", "--save"],
        )

        assert result.exit_code == 0, result.output
        assert "fresh-token" in result.output
        saved = json.loads((config_dir / "config.json").read_text())
        assert saved == {"gateway_url": GATEWAY, "auth_token": "fresh-token"}

    def test_token_refused(self, runner: CliRunner, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A refused token request exits with status 1."""
        httpx_mock.add_response(
            url=f"{GATEWAY}/u/createToken",
            method="POST",
            json={"code": 401, "message": "bad key", "data": None},
        )

        result = runner.invoke(
            cli, ["token", "--gateway", GATEWAY, "--account", "a", "--api-key", "k"]
        )

        assert result.exit_code == 1
        assert "bad key" in result.output

    def test_configure(self, runner: CliRunner, config_dir: Path) -> None:
        """configure writes the gateway URL without a trailing slash."""
        result = runner.invoke(
            cli, ["configure", "--gateway", f"{GATEWAY}/", "--token", "abc"]
        )

        assert result.exit_code == 0
        assert f"Gateway: {GATEWAY}" in result.output
        saved = json.loads((config_dir / "config.json").read_text())
        assert saved == {"gateway_url": GATEWAY, "auth_token": "abc"}
