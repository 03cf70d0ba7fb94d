"""Encrypted local keystore acting as the wallet signer for SolWallet."""

from __future__ import annotations

import base64
import json
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import base58
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from mnemonic import Mnemonic
from solders.keypair import Keypair

from solwallet.core import DEFAULT_CONFIG_DIR
from solwallet.core.errors import PreconditionError, SolWalletError

PBKDF_ITERATIONS = 390_000
KEY_FILENAME = "default_wallet.json"
MNEMONIC_STRENGTH = 256
MNEMONIC_WORD_COUNTS = {12, 15, 18, 21, 24}


class WalletError(SolWalletError):
    """Raised when wallet operations fail."""


@dataclass
class WalletStatus:
    """Represents the current wallet state."""

    exists: bool
    public_key: str | None
    is_unlocked: bool
    wallet_path: Path

    @property
    def masked_address(self) -> str:
        if not self.public_key:
            return "---"
        return f"{self.public_key[:4]}…{self.public_key[-4:]}"


class WalletManager:
    """Stores a single ed25519 keypair encrypted under a passphrase."""

    def __init__(self, keys_dir: Path | None = None) -> None:
        self.keys_dir = keys_dir or (DEFAULT_CONFIG_DIR / "keys")
        self.keys_dir.mkdir(parents=True, exist_ok=True)
        self.wallet_path = self.keys_dir / KEY_FILENAME
        self._keypair: Keypair | None = None
        self._cached_public_key: str | None = None
        self._mnemonic = Mnemonic("english")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def wallet_exists(self) -> bool:
        return self.wallet_path.exists()

    def status(self) -> WalletStatus:
        return WalletStatus(
            exists=self.wallet_exists(),
            public_key=self._cached_public_key or self._load_public_key_safely(),
            is_unlocked=self._keypair is not None,
            wallet_path=self.wallet_path,
        )

    def create_wallet(self, passphrase: str, *, force: bool = False) -> tuple[WalletStatus, str]:
        if self.wallet_exists() and not force:
            raise WalletError("Wallet already exists. Use force=True to overwrite.")

        mnemonic = self._mnemonic.generate(strength=MNEMONIC_STRENGTH)
        keypair = Keypair.from_seed(self._seed_from_mnemonic(mnemonic))
        self._store(keypair, passphrase, mnemonic=mnemonic)
        self._keypair = keypair
        return self.status(), mnemonic

    def restore_wallet(
        self,
        secret: str,
        passphrase: str,
        *,
        overwrite: bool = False,
    ) -> tuple[WalletStatus, str | None]:
        """Restore from a recovery phrase, a Solana CLI JSON key array, or a base58 secret."""
        if self.wallet_exists() and not overwrite:
            raise WalletError("Wallet already exists. Pass overwrite=True to replace it.")

        mnemonic: str | None = None
        if self._looks_like_mnemonic(secret):
            candidate = " ".join(secret.strip().lower().split())
            if not self._mnemonic.check(candidate):
                raise WalletError("Invalid recovery phrase checksum.")
            keypair = Keypair.from_seed(self._seed_from_mnemonic(candidate))
            mnemonic = candidate
        else:
            keypair = self._parse_secret_input(secret)

        self._store(keypair, passphrase, mnemonic=mnemonic)
        self._keypair = None
        return self.status(), mnemonic

    def unlock_wallet(self, passphrase: str) -> WalletStatus:
        if not self.wallet_exists():
            raise WalletError("No wallet found. Run /wallet create first.")
        self._keypair = self._decrypt_keypair(passphrase)
        self._cached_public_key = str(self._keypair.pubkey())
        return self.status()

    def lock_wallet(self) -> WalletStatus:
        self._keypair = None
        return self.status()

    def keypair(self) -> Keypair:
        """Return the unlocked signer or raise PreconditionError."""
        if not self.wallet_exists():
            raise PreconditionError("No wallet connected. Create or restore one first.")
        if self._keypair is None:
            raise PreconditionError("Wallet is locked. Run /wallet unlock first.")
        return self._keypair

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _store(self, keypair: Keypair, passphrase: str, *, mnemonic: str | None) -> None:
        public_key = str(keypair.pubkey())
        salt = os.urandom(16)
        nonce = os.urandom(12)
        plaintext = json.dumps(
            {
                "seed": base64.b64encode(keypair.secret()).decode("ascii"),
                "mnemonic": mnemonic,
            },
            separators=(",", ":"),
        ).encode("utf-8")
        ciphertext = AESGCM(self._derive_key(passphrase, salt)).encrypt(nonce, plaintext, associated_data=None)
        payload = {
            "public_key": public_key,
            "ciphertext": base64.b64encode(ciphertext).decode("ascii"),
            "nonce": base64.b64encode(nonce).decode("ascii"),
            "salt": base64.b64encode(salt).decode("ascii"),
            "iterations": PBKDF_ITERATIONS,
            "created_at": datetime.now(UTC).isoformat(),
        }
        self.wallet_path.write_text(json.dumps(payload, indent=2))
        try:
            os.chmod(self.wallet_path, 0o600)
        except PermissionError:
            # Ignore on platforms without chmod support (e.g., Windows)
            pass
        self._cached_public_key = public_key

    def _decrypt_keypair(self, passphrase: str) -> Keypair:
        data = self._read_payload()
        salt = base64.b64decode(data["salt"])
        nonce = base64.b64decode(data["nonce"])
        ciphertext = base64.b64decode(data["ciphertext"])
        try:
            plaintext = AESGCM(self._derive_key(passphrase, salt)).decrypt(nonce, ciphertext, associated_data=None)
        except InvalidTag as exc:
            raise WalletError("Invalid passphrase for wallet.") from exc
        decoded = json.loads(plaintext.decode("utf-8"))
        return Keypair.from_seed(base64.b64decode(decoded["seed"]))

    def _read_payload(self) -> dict[str, Any]:
        if not self.wallet_exists():
            raise WalletError("Wallet not initialized.")
        return json.loads(self.wallet_path.read_text())

    def _load_public_key_safely(self) -> str | None:
        if not self.wallet_exists():
            return None
        try:
            return self._read_payload().get("public_key")
        except (json.JSONDecodeError, OSError):
            return None

    @staticmethod
    def _parse_secret_input(value: str) -> Keypair:
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list) and all(isinstance(item, int) for item in parsed):
            try:
                raw = bytes(parsed)
            except ValueError as exc:
                raise WalletError("Secret key bytes must be in range 0-255.") from exc
        else:
            try:
                raw = base58.b58decode(value.strip())
            except ValueError as exc:
                raise WalletError("Unable to parse secret key input.") from exc
        if len(raw) == 64:
            try:
                keypair = Keypair.from_bytes(raw)
            except ValueError as exc:
                raise WalletError("Provided public key does not match private key.") from exc
            if bytes(keypair.pubkey()) != raw[32:]:
                raise WalletError("Provided public key does not match private key.")
            return keypair
        if len(raw) == 32:
            return Keypair.from_seed(raw)
        raise WalletError("Secret key must be 32 or 64 bytes.")

    @staticmethod
    def _derive_key(passphrase: str, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=PBKDF_ITERATIONS,
        )
        return kdf.derive(passphrase.encode("utf-8"))

    def _seed_from_mnemonic(self, mnemonic: str) -> bytes:
        return self._mnemonic.to_seed(mnemonic, passphrase="")[:32]

    def _looks_like_mnemonic(self, candidate: str) -> bool:
        words = candidate.strip().lower().split()
        if len(words) not in MNEMONIC_WORD_COUNTS:
            return False
        return all(word in self._mnemonic.wordlist for word in words)


__all__ = [
    "WalletManager",
    "WalletStatus",
    "WalletError",
]
