from contextlib import contextmanager

from mcp.server.fastmcp import FastMCP

# Import standard app components
from app.core.database import SessionLocal
from app.services.exclusivity import BundleExclusivityRule
from app.services.ledger_store import LedgerStore

# Create an MCP server instance
mcp = FastMCP("Baartal-Ledger-Server")


@contextmanager
def get_store():
    db = SessionLocal()
    try:
        yield LedgerStore(db)
    finally:
        db.close()


@mcp.tool()
def get_customer_balance(customer_id: str) -> dict:
    """Retrieve the B-Coin balance and lifetime totals for a customer."""
    with get_store() as store:
        profile = store.get_customer_profile(customer_id)
        if not profile:
            return {"error": "Customer not found"}
        return {
            "customer_id": profile.user_id,
            "b_coin_balance": str(profile.b_coin_balance),
            "total_b_coins_earned": str(profile.total_b_coins_earned),
            "total_b_coins_spent": str(profile.total_b_coins_spent),
        }


@mcp.tool()
def get_customer_transactions(customer_id: str) -> list[dict]:
    """Retrieve the customer's B-Coin ledger, newest first."""
    with get_store() as store:
        return [
            {
                "transaction_id": t.id,
                "business_id": t.business_id,
                "type": t.type,
                "source": t.source,
                "amount": str(t.amount),
                "bill_amount": str(t.bill_amount) if t.bill_amount is not None else None,
                "date": t.created_at.isoformat(),
            }
            for t in store.transactions_for_customer(customer_id)
        ]


@mcp.tool()
def check_category_availability(pincode: str, category: str) -> dict:
    """Check whether a business category is still free in a pincode."""
    with get_store() as store:
        result = BundleExclusivityRule(store).availability(pincode, category)
        existing = result["existing_business"]
        return {
            "pincode": pincode,
            "category": category,
            "available": result["available"],
            "existing_business": existing.business_name if existing else None,
        }


@mcp.tool()
def get_bundle(pincode: str) -> dict:
    """List the businesses that make up a pincode's bundle."""
    with get_store() as store:
        bundle = store.get_bundle_by_pincode(pincode)
        if not bundle:
            return {"error": "No bundle for this pincode"}
        return {
            "bundle_id": bundle.id,
            "name": bundle.name,
            "pincode": bundle.pincode,
            "businesses": [
                {
                    "business_id": b.id,
                    "business_name": b.business_name,
                    "category": b.category,
                    "is_active": b.is_active,
                }
                for b in store.businesses_in_bundle(bundle.id)
            ],
        }


if __name__ == "__main__":
    # Start the standard streaming stdio server
    print("Starting Baartal Ledger MCP Server on stdio...")
    mcp.run()
