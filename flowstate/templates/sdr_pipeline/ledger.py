"""Credit accounts for metered runs."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class Account:
    credits: int
    plan: str = "FREE"


class CreditLedger:
    """
    In-memory credit balances, one writer per run.

    Stands in for the billing database; a deployment would back the same
    methods with real storage.
    """

    def __init__(self, accounts: Mapping[str, Mapping] | None = None):
        self._accounts = {
            user_id: Account(credits=data["credits"], plan=data.get("plan", "FREE"))
            for user_id, data in (accounts or {}).items()
        }

    def get(self, user_id: str) -> Account | None:
        return self._accounts.get(user_id)

    def deduct(self, user_id: str, amount: int) -> int:
        """Take ``amount`` credits and return the remaining balance."""
        account = self._accounts[user_id]
        if account.credits < amount:
            raise ValueError(f"Insufficient credits for {user_id}: {account.credits} < {amount}")
        account.credits -= amount
        logger.info(f"  > Deducted {amount} credits. Remaining: {account.credits}")
        return account.credits
