import sys
from pathlib import Path
import tempfile

import pytest

# Ensure project root on sys.path for direct execution.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dealroom import cli, keymanager  # noqa: E402
from dealroom.config import Settings  # noqa: E402


def test_generate_account_command(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        cli.main(["--keys-dir", tmp, "generate-account", "alice"])
        out = capsys.readouterr().out
        assert "Generated account alice" in out
        assert keymanager.list_accounts(base_dir=tmp) == ["alice"]


def test_parser_uses_settings_defaults():
    settings = Settings(ledger_url="http://ledger:9000", keys_dir="wallets")
    args = cli.build_parser(settings).parse_args(["approve", "deal-1", "alice"])
    assert args.server == "http://ledger:9000"
    assert args.keys_dir == "wallets"
    assert args.func is cli.cmd_approve


def test_missing_account_exits_with_error(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--keys-dir", tmp, "--server", "http://127.0.0.1:9", "approve", "deal-1", "ghost"])
        assert excinfo.value.code == 1
        assert "Error:" in capsys.readouterr().err


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-vv", "-s", "--capture=no"]))
