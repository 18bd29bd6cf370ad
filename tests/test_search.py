import pytest

from business_directory_api.app.core.db import get_cursor
from business_directory_api.app.schemas.business import BusinessRead
from business_directory_api.app.services.business_service import filter_and_sort

from .conftest import API


def _listing(id, name="Shop", average_rating=None, total_reviews=0, city="Pune",
             state="Maharashtra", pincode="411001", category_id=1):
    return BusinessRead(
        id=id, name=name, slug=f"shop-{id}", owner_id=id, category_id=category_id, category=None,
        status="approved", description=None, address=None, city=city, state=state,
        pincode=pincode, phone=None, email=None, website=None, opening_hours=None,
        logo_url=None, cover_url=None, average_rating=average_rating,
        total_reviews=total_reviews, created_at=None, updated_at=None,
    )


def _set_aggregates(business_id, average_rating, total_reviews):
    with get_cursor() as cursor:
        cursor.execute(
            "UPDATE businesses SET average_rating = ?, total_reviews = ? WHERE id = ?",
            (average_rating, total_reviews, business_id),
        )


class TestFilterAndSort:
    def test_rating_sort_puts_higher_average_first(self):
        a = _listing(1, "A", average_rating=4.5, total_reviews=2)
        b = _listing(2, "B", average_rating=4.0, total_reviews=10)
        assert [x.id for x in filter_and_sort([b, a], sort_by="rating")] == [1, 2]

    def test_reviews_sort_puts_more_reviews_first(self):
        a = _listing(1, "A", average_rating=4.5, total_reviews=2)
        b = _listing(2, "B", average_rating=4.0, total_reviews=10)
        assert [x.id for x in filter_and_sort([a, b], sort_by="reviews")] == [2, 1]

    @pytest.mark.parametrize(
        "b_reviews, by_rating, by_reviews",
        [(89, [1, 2], [1, 2]), (130, [1, 2], [2, 1])],
    )
    def test_rating_and_review_orders_are_independent(self, b_reviews, by_rating, by_reviews):
        a = _listing(1, "A", average_rating=4.8, total_reviews=124)
        b = _listing(2, "B", average_rating=4.6, total_reviews=b_reviews)
        assert [x.id for x in filter_and_sort([b, a], sort_by="rating")] == by_rating
        assert [x.id for x in filter_and_sort([b, a], sort_by="reviews")] == by_reviews

    def test_unrated_listings_sort_last(self):
        rated = _listing(1, average_rating=1.0, total_reviews=1)
        unrated = _listing(2)
        assert [x.id for x in filter_and_sort([unrated, rated])] == [1, 2]

    def test_ties_keep_input_order(self):
        items = [_listing(i, average_rating=3.0) for i in (5, 3, 9)]
        assert [x.id for x in filter_and_sort(items)] == [5, 3, 9]

    @pytest.mark.parametrize("location", ["pune", "MAHA", "4110"])
    def test_location_matches_city_state_or_pincode(self, location):
        pune = _listing(1)
        delhi = _listing(2, city="New Delhi", state="Delhi", pincode="110001")
        assert [x.id for x in filter_and_sort([pune, delhi], location=location)] == [1]

    def test_predicates_combine(self):
        items = [
            _listing(1, "Fresh Mart", category_id=1),
            _listing(2, "Fresh Bakes", category_id=2),
            _listing(3, "Old Mart", category_id=1, city="Delhi", state="Delhi", pincode="110001"),
        ]
        result = filter_and_sort(items, search="fresh", location="pune", category_id=1)
        assert [x.id for x in result] == [1]

    def test_blank_filters_are_ignored(self):
        items = [_listing(1), _listing(2)]
        assert len(filter_and_sort(items, search="  ", location="")) == 2


def test_search_endpoint_filters_by_category_slug_and_name(client, register_business, set_status):
    _, grocer = register_business("Daily Needs", category="grocery")
    _, cafe = register_business("Bean There", category="Food & Beverages")
    set_status(grocer["id"])
    set_status(cafe["id"])

    by_slug = client.get(f"{API}/businesses/", params={"category": "grocery"}).json()
    assert [b["id"] for b in by_slug] == [grocer["id"]]
    assert by_slug[0]["category"]["name"] == "Grocery & Essentials"

    by_name = client.get(f"{API}/businesses/", params={"category": "food & beverages"}).json()
    assert [b["id"] for b in by_name] == [cafe["id"]]

    unknown = client.get(f"{API}/businesses/", params={"category": "spaceships"})
    assert unknown.status_code == 200
    assert unknown.json() == []


def test_search_endpoint_text_location_and_sorting(client, register_business, set_status):
    _, a = register_business("Green Grocer", city="Pune", pincode="411001")
    _, b = register_business("Green Valley", city="Mumbai", pincode="400001")
    _, c = register_business("Blue Bakery", city="Mumbai", pincode="400002")
    for business in (a, b, c):
        set_status(business["id"])
    _set_aggregates(a["id"], 4.5, 2)
    _set_aggregates(b["id"], 4.0, 10)

    resp = client.get(f"{API}/businesses/", params={"search": "GREEN"})
    assert [x["id"] for x in resp.json()] == [a["id"], b["id"]]

    resp = client.get(f"{API}/businesses/", params={"search": "green", "sort_by": "reviews"})
    assert [x["id"] for x in resp.json()] == [b["id"], a["id"]]

    resp = client.get(f"{API}/businesses/", params={"location": "mumbai"})
    assert {x["id"] for x in resp.json()} == {b["id"], c["id"]}

    resp = client.get(f"{API}/businesses/", params={"location": "400002"})
    assert [x["id"] for x in resp.json()] == [c["id"]]

    assert client.get(f"{API}/businesses/", params={"sort_by": "name"}).status_code == 422


def test_featured_returns_best_rated_approved(client, register_business, set_status):
    ids = []
    for rating, name in [(3.0, "Three"), (5.0, "Five"), (4.0, "Four")]:
        _, business = register_business(name)
        set_status(business["id"])
        _set_aggregates(business["id"], rating, 1)
        ids.append(business["id"])
    register_business("Still Pending")

    resp = client.get(f"{API}/businesses/featured", params={"limit": 2})
    assert [x["name"] for x in resp.json()] == ["Five", "Four"]

    default = client.get(f"{API}/businesses/featured").json()
    assert len(default) == 3


def test_categories_endpoint(client):
    resp = client.get(f"{API}/categories/")
    assert resp.status_code == 200
    slugs = [c["slug"] for c in resp.json()]
    assert len(slugs) == 9
    assert slugs[0] == "grocery"

    only = client.get(f"{API}/categories/", params={"category": "grocery"}).json()
    assert [c["name"] for c in only] == ["Grocery & Essentials"]

    assert client.get(f"{API}/categories/", params={"category": "nothing"}).json() == []

    detail = client.get(f"{API}/categories/food")
    assert detail.status_code == 200
    assert detail.json()["name"] == "Food & Beverages"
    assert client.get(f"{API}/categories/nothing").status_code == 404
