"""Parsing of `address,amount` recipient lists into transfer intents."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from pathlib import Path

from solders.pubkey import Pubkey

from solwallet.core.errors import ValidationError

LAMPORTS_PER_SOL = 1_000_000_000
SEPARATOR = ","
INVALID_ADDRESS = "Invalid address"
INVALID_AMOUNT = "Invalid amount"
# Unsigned decimal notation with an optional exponent; `_` separators are not accepted.
AMOUNT_PATTERN = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
MAX_AMOUNT_EXPONENT = 18


@dataclass(frozen=True)
class TransferIntent:
    """One parsed recipient row; `error` explains why an intent is not valid."""

    address: str
    amount: Decimal
    valid: bool
    error: str | None = None


def is_valid_address(address: str) -> bool:
    try:
        Pubkey.from_string(address)
    except ValueError:
        return False
    return True


def parse_amount(raw: str) -> Decimal | None:
    """Return a positive decimal within +/-1e18 magnitude, or None."""
    text = raw.strip()
    if not AMOUNT_PATTERN.fullmatch(text):
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if amount <= 0 or abs(amount.adjusted()) > MAX_AMOUNT_EXPONENT:
        return None
    return amount


def sol_to_lamports(amount: Decimal) -> int:
    """Convert whole-SOL decimal to lamports, truncating sub-lamport precision."""
    lamports = int((amount * LAMPORTS_PER_SOL).to_integral_value(rounding=ROUND_DOWN))
    if lamports <= 0:
        raise ValidationError(f"Amount {amount} is smaller than one lamport.")
    return lamports


class IntentValidator:
    """Turns raw text into transfer intents without ever failing on a bad row."""

    def parse(self, raw_text: str) -> list[TransferIntent]:
        return [self.parse_line(line) for line in raw_text.splitlines() if line.strip()]

    def parse_file(self, path: Path) -> list[TransferIntent]:
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ValidationError(f"Unable to read {path}: {exc}") from exc
        return self.parse(text)

    def parse_line(self, line: str) -> TransferIntent:
        address_part, _, rest = line.partition(SEPARATOR)
        amount_part = rest.split(SEPARATOR, 1)[0]
        address = address_part.strip()

        errors: list[str] = []
        if not is_valid_address(address):
            errors.append(INVALID_ADDRESS)
        amount = parse_amount(amount_part)
        if amount is None:
            errors.append(INVALID_AMOUNT)

        return TransferIntent(
            address=address,
            amount=amount if amount is not None else Decimal(0),
            valid=not errors,
            error=", ".join(errors) or None,
        )

    @staticmethod
    def valid_intents(intents: Iterable[TransferIntent]) -> list[TransferIntent]:
        return [intent for intent in intents if intent.valid]

    @staticmethod
    def valid_count(intents: Iterable[TransferIntent]) -> int:
        return sum(1 for intent in intents if intent.valid)

    @staticmethod
    def total_amount(intents: Iterable[TransferIntent]) -> Decimal:
        return sum((intent.amount for intent in intents if intent.valid), Decimal(0))


__all__ = [
    "INVALID_ADDRESS",
    "INVALID_AMOUNT",
    "IntentValidator",
    "TransferIntent",
    "is_valid_address",
    "parse_amount",
    "sol_to_lamports",
]
