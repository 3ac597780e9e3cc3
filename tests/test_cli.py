"""Tests for keyescrow.cli: command line interface."""

from pathlib import Path
from unittest.mock import MagicMock, patch

from keyescrow.cli import main
from keyescrow.errors import InputError
from keyescrow.models import RunPaths, RunSummary


def _result(tmp_path):
    result = MagicMock()
    result.summary = RunSummary(total=2, uploaded=1, not_found=1, failed=0)
    result.paths = RunPaths(
        csv_path=tmp_path / "BitLockerEscrow_03-09.csv",
        log_path=tmp_path / "BitLockerEscrow_03-09-26.log",
    )
    return result


class TestCli:
    def test_version(self, capsys):
        rc = main(["version"])
        assert rc == 0
        out = capsys.readouterr().out
        assert "keyescrow" in out
        assert "0.1.0" in out

    def test_version_flag(self, capsys):
        assert main(["--version"]) == 0
        assert "keyescrow" in capsys.readouterr().out

    def test_no_args(self, capsys):
        assert main([]) == 0
        assert "run" in capsys.readouterr().out

    def test_run_without_vault_fails(self, capsys, clean_env, tmp_path):
        ids = tmp_path / "ids.txt"
        ids.write_text("obj-1\n")
        rc = main(["run", "--input", str(ids), "--output-dir", str(tmp_path)])
        assert rc == 1
        assert "Error:" in capsys.readouterr().out

    def test_run_passes_overrides(self, capsys, clean_env, tmp_path):
        with patch("keyescrow.runner.run", return_value=_result(tmp_path)) as run:
            rc = main([
                "run",
                "-i", "ids.txt",
                "--vault", "kv-escrow",
                "-o", str(tmp_path),
                "--template", "{deviceName}--{key}",
                "--content-type", "RecoveryKey",
                "--tenant-id", "t",
                "--client-id", "c",
            ])
        assert rc == 0
        cfg = run.call_args.args[0]
        assert cfg.input_path == Path("ids.txt")
        assert cfg.vault_name == "kv-escrow"
        assert cfg.output_dir == tmp_path
        assert cfg.name_template == "{deviceName}--{key}"
        assert cfg.content_type == "RecoveryKey"
        assert cfg.tenant_id == "t"
        assert cfg.client_id == "c"
        out = capsys.readouterr().out
        assert "2 processed: 1 uploaded, 1 not found, 0 failed" in out
        assert "BitLockerEscrow_03-09.csv" in out

    def test_run_env_vault(self, clean_env, monkeypatch, tmp_path):
        monkeypatch.setenv("KEYESCROW_VAULT_NAME", "kv-env")
        with patch("keyescrow.runner.run", return_value=_result(tmp_path)) as run:
            assert main(["run"]) == 0
        assert run.call_args.args[0].vault_name == "kv-env"

    def test_run_fatal_error(self, capsys, clean_env):
        with patch("keyescrow.runner.run", side_effect=InputError("ids.txt", "file not found")):
            rc = main(["run", "--vault", "kv"])
        assert rc == 1
        out = capsys.readouterr().out
        assert "ids.txt" in out

    def test_run_undecodable_input(self, capsys, clean_env, tmp_path):
        ids = tmp_path / "ids.txt"
        ids.write_bytes(b"obj-1\n\xff\xfe\xfa\n")
        rc = main(["run", "-i", str(ids), "--vault", "kv", "-o", str(tmp_path / "out")])
        assert rc == 1
        assert "Error: Input file" in capsys.readouterr().out
        assert not list((tmp_path / "out").glob("*.csv"))
