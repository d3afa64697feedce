from typing import List

from dreampuff.assistant.schemas import CreateResponseInput, ProductStock
from dreampuff.models.product import ProductCategory

NO_PRODUCTS_REPLY = "Maaf, belum ada produk yang terdaftar saat ini."


def build_response_input(message: str, products: List[dict]) -> CreateResponseInput:
    """
    Work out what a stock question is about.

    A product whose full name appears in the message wins (the longest name
    if several do); otherwise a category name in the message selects every
    product of that category; otherwise the question is ``not_found``.
    ``products`` are catalog rows as returned by ``StockLedger.list_products``.
    """
    text = message.lower()

    named = [p for p in products if p["name"].lower() in text]
    if named:
        product = max(named, key=lambda p: len(p["name"]))
        return CreateResponseInput(
            type="product",
            entity_name=product["name"],
            products=[ProductStock(name=product["name"], stock=product["stock"])],
        )

    for category in ProductCategory:
        if category.value.lower() in text:
            return CreateResponseInput(
                type="category",
                entity_name=category.value,
                products=[
                    ProductStock(name=p["name"], stock=p["stock"])
                    for p in products
                    if p["category"] == category.value
                ],
            )

    return CreateResponseInput(type="not_found", entity_name=message.strip(), products=[])
