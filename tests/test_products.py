from decimal import Decimal

from business_directory_api.app.schemas.product import format_price

from .conftest import API

PRODUCTS = f"{API}/businesses/me/products/"


def test_price_labels_distinguish_missing_from_zero(client, register_business):
    owner, _ = register_business("Price Check")

    unpriced = client.post(PRODUCTS, json={"name": "Mystery Box"}, headers=owner)
    assert unpriced.status_code == 201
    assert unpriced.json()["price"] is None
    assert unpriced.json()["price_label"] == "Price not listed"

    free = client.post(PRODUCTS, json={"name": "Sample", "price": 0}, headers=owner).json()
    assert Decimal(free["price"]) == Decimal("0")
    assert free["price_label"] == "₹0.00"

    priced = client.post(PRODUCTS, json={"name": "Rice 1kg", "price": "12.5"}, headers=owner).json()
    assert priced["price_label"] == "₹12.50"


def test_negative_price_is_rejected(client, register_business):
    owner, _ = register_business("No Refunds")
    resp = client.post(PRODUCTS, json={"name": "Bad", "price": -1}, headers=owner)
    assert resp.status_code == 422


def test_availability_toggle_leaves_other_fields(client, register_business):
    owner, _ = register_business("Toggle Shop")
    product = client.post(
        PRODUCTS, json={"name": "Lamp", "price": 99, "description": "Desk lamp"}, headers=owner
    ).json()
    assert product["is_available"] is True

    resp = client.patch(
        f"{PRODUCTS}{product['id']}/availability", json={"is_available": False}, headers=owner
    )
    assert resp.status_code == 200
    toggled = resp.json()
    assert toggled["is_available"] is False
    assert toggled["name"] == "Lamp"
    assert toggled["description"] == "Desk lamp"
    assert toggled["price_label"] == "₹99.00"


def test_update_can_unlist_price(client, register_business):
    owner, _ = register_business("Flexible Prices")
    product = client.post(PRODUCTS, json={"name": "Chair", "price": 10}, headers=owner).json()

    resp = client.put(f"{PRODUCTS}{product['id']}", json={"price": None}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["price_label"] == "Price not listed"
    assert resp.json()["name"] == "Chair"

    resp = client.put(f"{PRODUCTS}{product['id']}", json={"name": None}, headers=owner)
    assert resp.status_code == 400


def test_products_are_scoped_to_owner(client, register_business):
    owner, _ = register_business("Mine")
    intruder, _ = register_business("Theirs")
    product = client.post(PRODUCTS, json={"name": "Kettle"}, headers=owner).json()

    resp = client.put(f"{PRODUCTS}{product['id']}", json={"name": "Stolen"}, headers=intruder)
    assert resp.status_code == 404
    assert client.delete(f"{PRODUCTS}{product['id']}", headers=intruder).status_code == 404
    assert client.get(PRODUCTS, headers=intruder).json() == []


def test_customers_cannot_manage_products(client, sign_up):
    customer = sign_up("buyer@example.com")
    assert client.get(PRODUCTS, headers=customer).status_code == 403


def test_delete_product(client, register_business):
    owner, _ = register_business("Clearance")
    product = client.post(PRODUCTS, json={"name": "Old Stock"}, headers=owner).json()
    assert client.delete(f"{PRODUCTS}{product['id']}", headers=owner).status_code == 204
    assert client.get(PRODUCTS, headers=owner).json() == []


def test_public_products_follow_listing_visibility(client, register_business, set_status):
    owner, business = register_business("Showroom")
    client.post(PRODUCTS, json={"name": "Sofa", "price": 500}, headers=owner)
    client.post(PRODUCTS, json={"name": "Table", "is_available": False}, headers=owner)

    public = f"{API}/businesses/{business['id']}/products"
    assert client.get(public).status_code == 404

    set_status(business["id"])
    names = [p["name"] for p in client.get(public).json()]
    assert names == ["Sofa", "Table"]


def test_dashboard_counts(client, register_business):
    owner, business = register_business("Counted")
    client.post(PRODUCTS, json={"name": "One"}, headers=owner)
    client.post(PRODUCTS, json={"name": "Two", "is_available": False}, headers=owner)

    dashboard = client.get(f"{API}/businesses/me/dashboard", headers=owner).json()
    assert dashboard["business"]["id"] == business["id"]
    assert dashboard["products_total"] == 2
    assert dashboard["products_available"] == 1
    assert dashboard["average_rating"] is None
    assert dashboard["total_reviews"] == 0


def test_format_price():
    assert format_price(None) == "Price not listed"
    assert format_price(Decimal("0")) == "₹0.00"
    assert format_price(Decimal("1234.5")) == "₹1234.50"


def test_update_rejects_blank_name_and_trims(client, register_business):
    owner, _ = register_business("Tidy Names")
    product = client.post(PRODUCTS, json={"name": "Mug"}, headers=owner).json()
    url = f"{PRODUCTS}{product['id']}"

    resp = client.put(url, json={"name": "   "}, headers=owner)
    assert resp.status_code == 422
    assert "Product name is required" in resp.text

    resp = client.put(url, json={"name": "  Big Mug  "}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Big Mug"


def test_description_survives_read_and_save(client, register_business):
    owner, _ = register_business("Spice Rack")
    text = 'Salt & Pepper <set> "2 pcs"'
    product = client.post(PRODUCTS, json={"name": "Shakers", "description": text}, headers=owner).json()
    assert product["description"] == text

    read = client.get(PRODUCTS, headers=owner).json()[0]
    resp = client.put(f"{PRODUCTS}{read['id']}", json={"description": read["description"]}, headers=owner)
    assert resp.json()["description"] == text
    assert client.get(PRODUCTS, headers=owner).json()[0]["description"] == text
