"""Example: complete a checkout against the sandbox client."""

import asyncio

from saleor_checkout_app import MockSaleorClient
from saleor_checkout_app.client import SaleorGraphQLClient, complete_checkout


async def main():
    """Run checkoutComplete once with canned responses."""
    mock = MockSaleorClient(errors=[{"field": "id", "message": "Invalid checkout", "code": "INVALID"}])

    async with SaleorGraphQLClient("http://sandbox/graphql/", "token", client=mock) as client:
        outcome = await complete_checkout(client, "Q2hlY2tvdXQ6MQ==")

    print(f"Outcome: {type(outcome).__name__}")
    print(outcome.model_dump())


if __name__ == "__main__":
    asyncio.run(main())
