"""Customer ledger reconciliation.

After a customer_event mutation succeeds, the customer's derived metafields
are brought back in line with it:

- the occasion list (JSON array of metaobject GIDs),
- the occasion count mirror of that list,
- the one-time loyalty bonus and the flag that guards it.

Shopify offers no transaction or compare-and-swap for metafields, so every
step is a plain read-modify-write. Two concurrent mutations for one customer
can still lose an append; the next reconciliation pass corrects the count but
not a dropped list entry.

Reconciliation is best effort: failures are logged and reported through the
returned ReconcileResult, never raised.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from occasions.config import Settings
from occasions.exceptions import ReconciliationError
from occasions.gid import customer_gid
from occasions.occasion_list import (
    append_occasion,
    dump_occasion_list,
    parse_occasion_list,
    remove_occasion,
)
from occasions.schemas import RewardConfig
from occasions.services.customer_metafields import CustomerMetafields, MetafieldWrite
from occasions.services.shopify_client import ShopifyClient

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    operation: str
    customer: str
    ok: bool = True
    count: Optional[int] = None
    reward_granted: bool = False
    error: Optional[str] = None

    def log(self) -> None:
        if self.ok:
            logger.info(
                "Reconciled %s for %s: count=%s reward_granted=%s",
                self.operation, self.customer, self.count, self.reward_granted,
            )
        else:
            logger.warning(
                "Reconciliation after %s for %s failed: %s",
                self.operation, self.customer, self.error,
            )


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


class LedgerService:
    """Keeps occasion list, occasion count and reward metafields in sync."""

    def __init__(self, client: ShopifyClient, config: Settings):
        self.config = config
        self.metafields = CustomerMetafields(client)

    # ------------------------------------------------------------------
    # Metafield helpers
    # ------------------------------------------------------------------

    def _read_list(self, owner: str):
        raw = self.metafields.get_value(
            owner, self.config.occasions_namespace, self.config.occasions_list_key
        )
        return parse_occasion_list(raw)

    def _list_write(self, ids) -> MetafieldWrite:
        return MetafieldWrite(
            namespace=self.config.occasions_namespace,
            key=self.config.occasions_list_key,
            value=dump_occasion_list(ids),
            type="list.metaobject_reference",
        )

    def _count_write(self, count: int) -> MetafieldWrite:
        return MetafieldWrite(
            namespace=self.config.occasions_namespace,
            key=self.config.occasions_count_key,
            value=str(count),
        )

    def _flag_write(self, granted: bool) -> MetafieldWrite:
        return MetafieldWrite(
            namespace=self.config.reward_flag_namespace,
            key=self.config.reward_flag_key,
            value="true" if granted else "false",
            type="boolean",
        )

    # ------------------------------------------------------------------
    # Reconciliation passes
    # ------------------------------------------------------------------

    def _run(self, operation: str, customer: str, step: Callable[[str, ReconcileResult], None]) -> ReconcileResult:
        result = ReconcileResult(operation=operation, customer=str(customer))
        try:
            owner = customer_gid(customer)
            result.customer = owner
            step(owner, result)
        except Exception as e:
            error = ReconciliationError(f"{operation} reconciliation failed: {e}")
            logger.warning("%s", error, exc_info=True)
            result.ok = False
            result.error = str(e)
        result.log()
        return result

    def reconcile_create(self, customer: str, occasion_id: str, reward: RewardConfig) -> ReconcileResult:
        def step(owner: str, result: ReconcileResult) -> None:
            ids = append_occasion(self._read_list(owner), occasion_id)
            self.metafields.set_values(owner, [self._list_write(ids)])
            result.count = len(ids)
            self.metafields.set_values(owner, [self._count_write(result.count)])
            result.reward_granted = self.apply_reward(owner, result.count, reward)

        return self._run("create", customer, step)

    def reconcile_update(self, customer: str, reward: RewardConfig) -> ReconcileResult:
        def step(owner: str, result: ReconcileResult) -> None:
            actual = len(self._read_list(owner))
            stored = _parse_int(
                self.metafields.get_value(
                    owner, self.config.occasions_namespace, self.config.occasions_count_key
                )
            )
            if stored != actual:
                logger.info("Occasion count for %s was %s, correcting to %s", owner, stored, actual)
                self.metafields.set_values(owner, [self._count_write(actual)])
            result.count = actual
            result.reward_granted = self.apply_reward(owner, actual, reward)

        return self._run("update", customer, step)

    def reconcile_delete(self, customer: str, deleted_id: Optional[str] = None) -> ReconcileResult:
        """
        Lower the cached count after a delete.

        The list metafield may still hold the deleted id, so the count is the
        cached length minus one, clamped at zero. When the deleted id is still
        listed it is pruned. The reward flag is left untouched.
        """
        def step(owner: str, result: ReconcileResult) -> None:
            ids = self._read_list(owner)
            result.count = max(0, len(ids) - 1)
            writes = [self._count_write(result.count)]
            if deleted_id and deleted_id in ids:
                writes.append(self._list_write(remove_occasion(ids, deleted_id)))
            self.metafields.set_values(owner, writes)

        return self._run("delete", customer, step)

    # ------------------------------------------------------------------
    # Reward
    # ------------------------------------------------------------------

    def apply_reward(self, owner: str, count: int, reward: RewardConfig) -> bool:
        """Grant the loyalty bonus once the target is met. Returns True if granted now."""
        if count < reward.points_target:
            return False

        flag_raw, points_raw = self.metafields.get_reward_state(
            owner,
            self.config.reward_flag_namespace,
            self.config.reward_flag_key,
            reward.points_namespace,
            reward.points_key,
        )
        if flag_raw is None:
            self.metafields.set_values(owner, [self._flag_write(False)])
        elif flag_raw.strip().lower() == "true":
            logger.debug("Reward already granted for %s", owner)
            return False

        points = _parse_int(points_raw)
        if points is None:
            if points_raw is not None:
                raise ReconciliationError(f"Unreadable loyalty points value: {points_raw!r}")
            points = 0

        self.metafields.set_values(
            owner,
            [
                MetafieldWrite(
                    namespace=reward.points_namespace,
                    key=reward.points_key,
                    value=str(points + reward.points_value),
                    type="number_integer",
                ),
                self._flag_write(True),
            ],
        )
        logger.info(
            "Granted %s loyalty points to %s (%s -> %s)",
            reward.points_value, owner, points, points + reward.points_value,
        )
        return True
