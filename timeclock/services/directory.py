"""Local account directory used for offline login.

The first versions of the app authenticated against a hard-coded list of
accounts before the remote API existed. The list survives as an opt-in offline
fallback (``OFFLINE_LOGIN_ENABLED``) and as the in-memory backing for the
admin user screens when they run without a server.
"""

from __future__ import annotations

import hmac
import time
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from ..schemas.auth import Identity, Role


@dataclass(frozen=True)
class LocalAccount:
    id: str
    name: str
    email: str
    password: str
    is_admin: bool = False
    cpf: str = ""
    workload: str = "8h/dia"

    def to_identity(self) -> Identity:
        return Identity(
            id=self.id,
            name=self.name,
            email=self.email,
            role=Role.ADMIN if self.is_admin else Role.USER,
        )


SEED_ACCOUNTS = (
    LocalAccount(
        id="1",
        name="Admin Sistema",
        email="admin@pontoapp.com",
        password="admin123",
        is_admin=True,
        cpf="000.000.000-00",
    ),
    LocalAccount(
        id="2",
        name="João Silva",
        email="joao@empresa.com",
        password="123456",
        cpf="123.456.789-01",
    ),
    LocalAccount(
        id="3",
        name="Maria Santos",
        email="maria@empresa.com",
        password="123456",
        cpf="987.654.321-09",
        workload="6h/dia",
    ),
)


class LocalDirectory:
    def __init__(self, accounts: Optional[List[LocalAccount]] = None) -> None:
        seed = SEED_ACCOUNTS if accounts is None else accounts
        self._accounts: Dict[str, LocalAccount] = {account.id: account for account in seed}

    def authenticate(self, email: str, password: str) -> Identity | None:
        for account in self._accounts.values():
            if account.email == email and hmac.compare_digest(account.password, password):
                return account.to_identity()
        return None

    def add(self, **fields: object) -> LocalAccount:
        account_id = str(fields.pop("id", None) or time.time_ns())
        account = LocalAccount(id=account_id, **fields)  # type: ignore[arg-type]
        self._accounts[account.id] = account
        return account

    def update(self, account_id: str, **changes: object) -> LocalAccount | None:
        account = self._accounts.get(account_id)
        if account is None:
            return None
        changes.pop("id", None)
        updated = replace(account, **changes)  # type: ignore[arg-type]
        self._accounts[account_id] = updated
        return updated

    def remove(self, account_id: str) -> bool:
        return self._accounts.pop(account_id, None) is not None

    def non_admin_users(self) -> List[LocalAccount]:
        # Admins are hidden from the user management list.
        return [account for account in self._accounts.values() if not account.is_admin]
