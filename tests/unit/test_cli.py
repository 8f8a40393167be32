"""Unit tests for the ansible-db CLI."""

import json

import pytest
import yaml

from ansible_db import __version__
from ansible_db.cli import main
from ansible_db.engine.errors import ExitCode


class TestMainCLI:
    """Tests for parser construction and version output."""

    def test_create_parser(self):
        parser = main.create_parser()
        assert parser.prog == "ansible-db"

    def test_version_string(self):
        version = main.get_version_string()
        assert __version__ in version
        assert "python" in version

    def test_host_list_and_graph_are_exclusive(self, capsys):
        with pytest.raises(SystemExit):
            main.create_parser().parse_args(["--list", "--graph"])

    def test_password_flags_are_exclusive(self, capsys):
        with pytest.raises(SystemExit):
            main.create_parser().parse_args(["--vault-password", "a", "--vault-password-file", "b"])


class TestInventoryOutput:
    """Inventory-only invocations."""

    def test_host_names(self, inventory_file, capsys):
        result = main.main(["-i", str(inventory_file)])

        assert result == ExitCode.SUCCESS
        captured = capsys.readouterr()
        assert captured.out.splitlines() == ["controller", "ny-sw01", "ny-sw02", "ny-sw03"]

    def test_host_returns_json(self, inventory_file, capsys):
        result = main.main(["-i", str(inventory_file), "--host", "ny-sw01"])

        assert result == 0
        data = json.loads(capsys.readouterr().out)
        assert data["name"] == "ny-sw01"
        assert data["groups"] == ["all", "dc", "ny", "ny-core"]
        assert data["group_chains"] == ["all", "dc,ny,ny-core"]
        assert data["variables"]["site"] == "global"
        assert "credentials" not in data

    def test_host_returns_yaml(self, inventory_file, capsys):
        result = main.main(["-i", str(inventory_file), "--host", "ny-sw03", "--yaml"])

        assert result == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["variables"]["descr"] == "access switch rack 3"

    def test_list_returns_json(self, inventory_file, capsys):
        result = main.main(["-i", str(inventory_file), "--list"])

        assert result == 0
        data = json.loads(capsys.readouterr().out)
        assert data["all"]["hosts"] == ["controller"]
        assert data["all"]["children"] == ["dc"]
        assert data["ny"]["children"] == ["ny-core", "ny-access"]
        assert data["ny-core"]["hosts"] == ["ny-sw01", "ny-sw02"]
        assert data["dc"]["vars"] == {"site": "global", "domain": "example.net"}
        assert data["_meta"]["hostvars"]["controller"]["ansible_user"] == "netops"

    def test_graph(self, inventory_file, capsys):
        result = main.main(["-i", str(inventory_file), "--graph"])

        assert result == 0
        assert capsys.readouterr().out.splitlines() == [
            "@all:",
            "  |--@dc:",
            "  |  |--@ny:",
            "  |  |  |--@ny-core:",
            "  |  |  |  |--ny-sw01",
            "  |  |  |  |--ny-sw02",
            "  |  |  |--@ny-access:",
            "  |  |  |  |--ny-sw03",
            "  |--controller",
        ]

    def test_missing_host(self, inventory_file, capsys):
        result = main.main(["-i", str(inventory_file), "--host", "nope"])

        assert result == ExitCode.NOT_FOUND
        assert "host nope does not exist" in capsys.readouterr().err

    def test_missing_inventory_file(self, tmp_path, capsys):
        result = main.main(["-i", str(tmp_path / "missing")])

        assert result == ExitCode.GENERIC_ERROR
        assert "ERROR" in capsys.readouterr().err

    def test_malformed_inventory(self, tmp_path, capsys):
        path = tmp_path / "hosts"
        path.write_text("[web:children:extra]\nnginx\n")

        result = main.main(["-i", str(path)])

        assert result == ExitCode.PARSE_ERROR
        assert "line 1" in capsys.readouterr().err

    def test_inventory_not_utf8(self, tmp_path, capsys):
        path = tmp_path / "hosts"
        path.write_bytes(b"h1 os=\xff\xfe\n")

        result = main.main(["-i", str(path)])

        assert result == ExitCode.PARSE_ERROR
        assert "not valid UTF-8" in capsys.readouterr().err

    def test_password_file_not_utf8(self, inventory_file, vault_files, tmp_path, capsys):
        vault_file, _ = vault_files
        key_file = tmp_path / "bad.key"
        key_file.write_bytes(b"\xff\xfe\n")

        result = main.main([
            "-i", str(inventory_file),
            "--vault", str(vault_file),
            "--vault-password-file", str(key_file),
        ])

        assert result == ExitCode.VAULT_ERROR
        assert "not valid UTF-8" in capsys.readouterr().err

    def test_inconsistent_inventory(self, tmp_path, capsys):
        path = tmp_path / "hosts"
        path.write_text("web1\n[db:vars]\nport=5432\n")

        assert main.main(["-i", str(path)]) == ExitCode.PARSE_ERROR

    def test_invalid_log_level(self, inventory_file, capsys):
        result = main.main(["-i", str(inventory_file), "--log-level", "LOUD"])

        assert result == ExitCode.GENERIC_ERROR
        assert "invalid log level" in capsys.readouterr().err


class TestVaultOutput:
    """Invocations that also decode a vault."""

    def test_host_with_credentials_masked(self, inventory_file, vault_files, capsys):
        vault_file, key_file = vault_files
        result = main.main([
            "-i", str(inventory_file),
            "--vault", str(vault_file),
            "--vault-password-file", str(key_file),
            "--host", "ny-sw01",
        ])

        assert result == 0
        out = capsys.readouterr().out
        data = json.loads(out)
        assert [c["description"] for c in data["credentials"]] == [
            "NY devices", "NX-OS switches", "break glass", "fallback",
        ]
        assert data["credentials"][0]["password"] == "********"
        assert "ny-secret" not in out

    def test_host_with_credentials_revealed(self, inventory_file, vault_files, vault_password, capsys):
        vault_file, _ = vault_files
        result = main.main([
            "-i", str(inventory_file),
            "--vault", str(vault_file),
            "--vault-password", vault_password,
            "--host", "controller",
            "--show-secrets",
        ])

        assert result == 0
        data = json.loads(capsys.readouterr().out)
        assert [c["username"] for c in data["credentials"]] == ["breakglass", "root"]
        assert data["credentials"][0]["password"] == "bg-secret"

    def test_wrong_vault_password(self, inventory_file, vault_files, capsys):
        vault_file, _ = vault_files
        result = main.main([
            "-i", str(inventory_file),
            "--vault", str(vault_file),
            "--vault-password", "wrong",
        ])

        assert result == ExitCode.VAULT_ERROR
        assert "HMAC verification failed" in capsys.readouterr().err

    def test_vault_without_password(self, inventory_file, vault_files, capsys):
        vault_file, _ = vault_files
        result = main.main(["-i", str(inventory_file), "--vault", str(vault_file)])

        assert result == ExitCode.GENERIC_ERROR
        assert "--vault-password" in capsys.readouterr().err
