"""Registry of selectable RPC endpoints: built-in clusters plus persisted custom RPCs."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from solwallet.core.errors import PersistenceError, PreconditionError, ValidationError

logger = logging.getLogger(__name__)

CUSTOM_RPCS_FILENAME = "custom_rpcs.json"
DEFAULT_NETWORK_ID = "devnet"


@dataclass(frozen=True)
class NetworkProfile:
    """A selectable network. Custom profiles use their endpoint URL as id."""

    id: str
    name: str
    endpoint: str
    is_custom: bool = False


BUILTIN_NETWORKS: tuple[NetworkProfile, ...] = (
    NetworkProfile(id="devnet", name="Devnet", endpoint="https://api.devnet.solana.com"),
    NetworkProfile(id="testnet", name="Testnet", endpoint="https://api.testnet.solana.com"),
    NetworkProfile(id="mainnet-beta", name="Mainnet Beta", endpoint="https://api.mainnet-beta.solana.com"),
)


class CustomRpc(BaseModel):
    """Persisted form of a user-added RPC endpoint."""

    model_config = ConfigDict(strict=True, frozen=True)

    name: str
    url: str

    def to_profile(self) -> NetworkProfile:
        return NetworkProfile(id=self.url, name=self.name, endpoint=self.url, is_custom=True)


def validate_rpc_url(url: str) -> str:
    """Return the trimmed URL or raise ValidationError if it is not http(s)."""
    candidate = url.strip()
    if not candidate:
        raise ValidationError("RPC URL is required.")
    try:
        parts = urlsplit(candidate)
        _ = parts.port  # raises ValueError for out-of-range ports
    except ValueError as exc:
        raise ValidationError(f"Invalid RPC URL: {candidate}") from exc
    if parts.scheme not in {"http", "https"} or not parts.hostname:
        raise ValidationError("RPC URL must be a well-formed http:// or https:// URL.")
    return candidate


class CustomRpcStore:
    """Reads and writes the ordered custom RPC list as a JSON array of {name, url}."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> list[CustomRpc]:
        """Return stored RPCs; missing or malformed data yields an empty list."""
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Discarding unreadable custom RPC list at %s: %s", self.path, exc)
            return []
        if not isinstance(payload, list):
            logger.warning("Discarding custom RPC list at %s: expected a JSON array", self.path)
            return []
        try:
            return [CustomRpc.model_validate(item) for item in payload]
        except PydanticValidationError as exc:
            logger.warning("Discarding malformed custom RPC list at %s: %s", self.path, exc)
            return []

    def save(self, rpcs: Sequence[CustomRpc]) -> None:
        payload = json.dumps([rpc.model_dump() for rpc in rpcs], indent=2)
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            raise PersistenceError(f"Unable to save custom RPCs to {self.path}: {exc}") from exc


class NetworkConfigRegistry:
    """Owns the known networks, the selected one, and the custom RPC store.

    `active_endpoint()` is the single source of truth for every RPC consumer.
    While a batch holds `pinned()`, changes that would move the active
    endpoint are refused with PreconditionError.
    """

    def __init__(self, store: CustomRpcStore | None = None, *, selected_id: str = DEFAULT_NETWORK_ID) -> None:
        self._store = store
        self._custom: list[CustomRpc] = self._sanitize(store.load()) if store is not None else []
        self._selected_id = DEFAULT_NETWORK_ID
        self._pins = 0
        self.select_network(selected_id)

    @classmethod
    def from_config_dir(cls, config_dir: Path, *, selected_id: str = DEFAULT_NETWORK_ID) -> NetworkConfigRegistry:
        return cls(CustomRpcStore(config_dir / CUSTOM_RPCS_FILENAME), selected_id=selected_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_networks(self) -> list[NetworkProfile]:
        return [*BUILTIN_NETWORKS, *(rpc.to_profile() for rpc in self._custom)]

    def get(self, network_id: str) -> NetworkProfile | None:
        for profile in self.list_networks():
            if profile.id == network_id:
                return profile
        return None

    def selected_network(self) -> NetworkProfile:
        return self.get(self._selected_id) or BUILTIN_NETWORKS[0]

    def active_endpoint(self) -> str:
        return self.selected_network().endpoint

    @property
    def is_pinned(self) -> bool:
        return self._pins > 0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def select_network(self, network_id: str) -> NetworkProfile:
        """Select `network_id`; unknown ids fall back to the default network."""
        target = network_id if self.get(network_id) is not None else DEFAULT_NETWORK_ID
        if target != network_id:
            logger.warning("Network with id %r not found. Defaulting to %s.", network_id, DEFAULT_NETWORK_ID)
        if target != self._selected_id:
            self._ensure_unpinned()
            self._selected_id = target
            logger.info("Selected network %s (%s)", target, self.active_endpoint())
        return self.selected_network()

    def add_custom_rpc(self, name: str, url: str) -> NetworkProfile:
        rpc = self._validated(name, url, exclude=None)
        self._commit([*self._custom, rpc])
        logger.info("Added custom RPC %r", rpc.name)
        return rpc.to_profile()

    def update_custom_rpc(self, original_name: str, new_name: str, new_url: str) -> NetworkProfile:
        index = self._index_of(original_name)
        current = self._custom[index]
        rpc = self._validated(new_name, new_url, exclude=current)
        was_selected = self._selected_id == current.url
        if was_selected and rpc.url != current.url:
            self._ensure_unpinned()
        updated = list(self._custom)
        updated[index] = rpc
        self._commit(updated)
        if was_selected:
            self._selected_id = rpc.url
        logger.info("Updated custom RPC %r", original_name)
        return rpc.to_profile()

    def delete_custom_rpc(self, name: str) -> None:
        index = self._index_of(name)
        target = self._custom[index]
        was_selected = self._selected_id == target.url
        if was_selected:
            self._ensure_unpinned()
        self._commit([rpc for i, rpc in enumerate(self._custom) if i != index])
        if was_selected:
            self._selected_id = DEFAULT_NETWORK_ID
            logger.info("Deleted selected RPC %r; reverted to %s", name, DEFAULT_NETWORK_ID)

    @contextmanager
    def pinned(self) -> Iterator[str]:
        """Hold the active endpoint fixed for the duration of the block."""
        self._pins += 1
        try:
            yield self.active_endpoint()
        finally:
            self._pins -= 1

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _validated(self, name: str, url: str, *, exclude: CustomRpc | None) -> CustomRpc:
        clean_name = name.strip()
        if not clean_name:
            raise ValidationError("RPC name is required.")
        clean_url = validate_rpc_url(url)
        for profile in self.list_networks():
            if exclude is not None and profile.is_custom and profile.name == exclude.name:
                continue
            if profile.name == clean_name or profile.endpoint == clean_url:
                raise ValidationError("An RPC with this name or URL already exists.")
        return CustomRpc(name=clean_name, url=clean_url)

    def _index_of(self, name: str) -> int:
        for index, rpc in enumerate(self._custom):
            if rpc.name == name:
                return index
        raise ValidationError(f"No custom RPC named {name!r}.")

    def _commit(self, rpcs: list[CustomRpc]) -> None:
        if self._store is not None:
            self._store.save(rpcs)
        self._custom = rpcs

    def _ensure_unpinned(self) -> None:
        if self.is_pinned:
            raise PreconditionError("Cannot change the active network while a batch is running.")

    @staticmethod
    def _sanitize(rpcs: list[CustomRpc]) -> list[CustomRpc]:
        names = {profile.name for profile in BUILTIN_NETWORKS}
        urls = {profile.endpoint for profile in BUILTIN_NETWORKS}
        kept: list[CustomRpc] = []
        for rpc in rpcs:
            try:
                validate_rpc_url(rpc.url)
            except ValidationError:
                logger.warning("Skipping stored RPC %r with invalid URL", rpc.name)
                continue
            if not rpc.name.strip() or rpc.name in names or rpc.url in urls:
                logger.warning("Skipping stored RPC %r: empty or duplicate name/URL", rpc.name)
                continue
            names.add(rpc.name)
            urls.add(rpc.url)
            kept.append(rpc)
        return kept


__all__ = [
    "BUILTIN_NETWORKS",
    "CUSTOM_RPCS_FILENAME",
    "DEFAULT_NETWORK_ID",
    "CustomRpc",
    "CustomRpcStore",
    "NetworkConfigRegistry",
    "NetworkProfile",
    "validate_rpc_url",
]
