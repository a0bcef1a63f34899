"""
Concurrency tests: parallel ledger operations for one customer, each on
its own session, must not lose updates or double-apply.
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from app.core.exceptions import InsufficientBalanceError
from app.services.accrual_engine import LedgerEngine
from app.services.ledger_store import LedgerStore


def _run_in_threads(session_factory, workers, operation):
    """
    Run operation(engine, i) for each worker on a dedicated session.
    Returns (transaction_id, replayed) per worker, or None on a rejected redeem.
    """

    def task(i):
        session = session_factory()
        try:
            result = operation(LedgerEngine(LedgerStore(session)), i)
            return result.transaction.id, result.replayed
        except InsufficientBalanceError:
            return None
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(task, range(workers)))


def test_parallel_earns_are_all_applied(store, session_factory, make_customer, make_business):
    customer = make_customer()
    shop, _ = make_business(rate="5.00")
    n = 20

    results = _run_in_threads(
        session_factory, n,
        lambda engine, i: engine.earn(customer.id, shop.id, "200.00"),
    )

    assert all(r is not None for r in results)
    store.db.expire_all()
    profile = store.get_customer_profile(customer.id)
    assert profile.b_coin_balance == Decimal("10.00") * n
    assert profile.total_b_coins_earned == Decimal("10.00") * n
    assert len(store.transactions_for_customer(customer.id)) == n
    business = store.get_business(shop.id)
    assert business.total_b_coins_issued == Decimal("10.00") * n
    assert business.total_customers == 1


def test_parallel_redeems_never_overdraw(store, session_factory, make_customer, make_business):
    customer = make_customer()
    shop, _ = make_business()
    LedgerEngine(store).credit(customer.id, shop.id, "100.00")

    results = _run_in_threads(
        session_factory, 10,
        lambda engine, i: engine.redeem(customer.id, shop.id, "30.00"),
    )

    succeeded = [r for r in results if r is not None]
    assert len(succeeded) == 3
    store.db.expire_all()
    profile = store.get_customer_profile(customer.id)
    assert profile.b_coin_balance == Decimal("10.00")
    assert profile.total_b_coins_spent == Decimal("90.00")


def test_parallel_retries_with_one_key_apply_once(store, session_factory, make_customer, make_business):
    customer = make_customer()
    shop, _ = make_business(rate="5.00")

    results = _run_in_threads(
        session_factory, 8,
        lambda engine, i: engine.earn(customer.id, shop.id, "800", idempotency_key="retry-storm"),
    )

    assert len({txn_id for txn_id, _ in results}) == 1
    assert sum(1 for _, replayed in results if not replayed) == 1
    store.db.expire_all()
    assert store.get_customer_profile(customer.id).b_coin_balance == Decimal("40.00")
    assert len(store.transactions_for_customer(customer.id)) == 1
