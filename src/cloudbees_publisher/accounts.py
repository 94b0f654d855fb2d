"""
CloudBees account registry.

Holds the globally configured credentials. The registry keeps an immutable
tuple and swaps it wholesale on replace, so readers always see either the
old or the new account list, never a mix of both.
"""
import logging
import os
import threading
from typing import Iterable, List, Optional, Tuple

import yaml

from .models import Account

logger = logging.getLogger(__name__)


class AccountStoreError(Exception):
    """Exception raised when the accounts file cannot be read or written"""
    pass


class AccountStore:
    """YAML file holding the configured accounts"""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[Account]:
        """
        Load accounts from disk

        Returns:
            List of accounts in file order (empty if the file does not exist)

        Raises:
            AccountStoreError: If the file exists but is not a valid accounts file
        """
        if not os.path.exists(self.path):
            logger.info(f"No accounts file at {self.path}, starting with empty registry")
            return []

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise AccountStoreError(f"Failed to read accounts file {self.path}: {e}") from e

        if data is None:
            return []
        if not isinstance(data, dict) or not isinstance(data.get("accounts", []), list):
            raise AccountStoreError(f"Invalid accounts file {self.path}: expected an 'accounts' list")

        accounts = []
        for entry in data.get("accounts") or []:
            if not isinstance(entry, dict):
                raise AccountStoreError(f"Invalid account entry in {self.path}: {entry!r}")
            accounts.append(Account.from_dict(entry))

        logger.info(f"Loaded {len(accounts)} CloudBees accounts from {self.path}")
        return accounts

    def save(self, accounts: Iterable[Account]) -> None:
        """Write accounts to disk, replacing the previous file atomically"""
        payload = {"accounts": [account.to_dict() for account in accounts]}

        directory = os.path.dirname(self.path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(payload, f, default_flow_style=False, sort_keys=False)
            # Keys are secrets
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError as e:
            # Tmp file holds the keys
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise AccountStoreError(f"Failed to write accounts file {self.path}: {e}") from e

        logger.info(f"Saved {len(payload['accounts'])} CloudBees accounts to {self.path}")


class AccountRegistry:
    """Ordered set of CloudBees accounts with a default-account rule"""

    def __init__(self, accounts: Iterable[Account] = (), store: Optional[AccountStore] = None):
        self.store = store
        self._accounts: Tuple[Account, ...] = tuple(accounts)
        self._lock = threading.Lock()

    @classmethod
    def from_store(cls, store: AccountStore) -> "AccountRegistry":
        """Create a registry populated from persisted configuration"""
        return cls(store.load(), store=store)

    def replace_all(self, accounts: Iterable[Account]) -> None:
        """Substitute the entire account set"""
        snapshot = tuple(accounts)
        with self._lock:
            self._accounts = snapshot

    def configure(self, accounts: Iterable[Account]) -> None:
        """Replace the account set and persist it (admin configuration path)"""
        snapshot = tuple(accounts)
        self.replace_all(snapshot)
        if self.store is not None:
            self.store.save(snapshot)

    def add(self, account: Account) -> None:
        with self._lock:
            self._accounts = self._accounts + (account,)

    def all(self) -> Tuple[Account, ...]:
        return self._accounts

    def lookup(self, name: Optional[str]) -> Optional[Account]:
        """
        Find an account by name

        Args:
            name: Exact, case-sensitive account name, or None for the default account

        Returns:
            The first account with that name, the first account overall when
            name is None, or None if nothing matches
        """
        accounts = self._accounts
        if name is None:
            return accounts[0] if accounts else None
        for account in accounts:
            if account.name == name:
                return account
        return None

    def names(self) -> List[str]:
        return [account.name for account in self._accounts]

    def __len__(self) -> int:
        return len(self._accounts)
