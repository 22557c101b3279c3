import json
from pathlib import Path
from typing import Dict

from . import crypto
from .accounts import LocalAccount


DEFAULT_KEYS_DIR = Path("keys")


def _ensure_dir(base_dir: Path) -> None:
    base_dir.mkdir(parents=True, exist_ok=True)


def save_account(account: LocalAccount, base_dir: Path | str = DEFAULT_KEYS_DIR) -> Dict[str, str]:
    """
    Store an account's signing key on disk.
    Keys are PEM blobs base64-encoded in JSON, next to the derived address.
    """
    base_dir = Path(base_dir)
    _ensure_dir(base_dir)
    data = {
        "name": account.name,
        "address": account.address,
        "signing": {"private": crypto.b64e(account.private_pem()), "public": crypto.b64e(account.public_pem())},
    }
    (base_dir / f"{account.name}.json").write_text(json.dumps(data, indent=2))
    return data


def generate_account(name: str, base_dir: Path | str = DEFAULT_KEYS_DIR) -> Dict[str, str]:
    """Generate a fresh signing account and persist it."""
    return save_account(LocalAccount.generate(name=name), base_dir=base_dir)


def load_account(name: str, base_dir: Path | str = DEFAULT_KEYS_DIR, **kwargs) -> LocalAccount:
    base_dir = Path(base_dir)
    path = base_dir / f"{name}.json"
    if not path.exists():
        raise FileNotFoundError(f"No keys for {name} in {path}")
    raw = json.loads(path.read_text())
    return LocalAccount.from_pem(crypto.b64d(raw["signing"]["private"]), name=raw["name"], **kwargs)


def list_accounts(base_dir: Path | str = DEFAULT_KEYS_DIR) -> list[str]:
    base_dir = Path(base_dir)
    if not base_dir.exists():
        return []
    return sorted(p.stem for p in base_dir.glob("*.json"))
