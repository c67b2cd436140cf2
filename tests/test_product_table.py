"""Tests for the product table service: filtering, counting, paging, formatting."""

from decimal import Decimal

import pytest

from app.db.models import Category, Product
from app.schemas.datatable import DataTableRequest, OrderSpec
from app.services.product_table import (
    COLUMNS,
    PLACEHOLDER_CATEGORY,
    column_declarations,
    fetch_product_page,
    format_product_row,
)


def page_ids(page):
    return [row.id for row in page.data]


class TestScenarios:
    """Two categories, two products."""

    def test_search_phone(self, db, catalog):
        page = fetch_product_page(db, DataTableRequest(draw=1, search_term="phone"))

        assert page_ids(page) == [catalog["phone"]]
        assert page.records_total == 2
        assert page.records_filtered == 1

    @pytest.mark.parametrize("term", ["599.00", "15.00", "9.0"])
    def test_search_by_displayed_price(self, db, catalog, term):
        page = fetch_product_page(db, DataTableRequest(search_term=term))

        expected = [
            product_id
            for product_id, price in ((catalog["phone"], "599.00"), (catalog["novel"], "15.00"))
            if term in price
        ]
        assert page_ids(page) == expected
        assert [row.price for row in page.data] == [
            "599.00" if i == catalog["phone"] else "15.00" for i in expected
        ]

    def test_category_filter(self, db, catalog):
        page = fetch_product_page(db, DataTableRequest(category_id=str(catalog["books"])))

        assert page_ids(page) == [catalog["novel"]]
        assert page.records_filtered == 1

    def test_no_filters_returns_everything(self, db, catalog):
        page = fetch_product_page(db, DataTableRequest())

        assert page_ids(page) == [1, 2]
        assert page.records_total == page.records_filtered == 2

    def test_after_category_deletion(self, db, catalog):
        db.delete(db.get(Category, catalog["electronics"]))
        db.commit()

        page = fetch_product_page(db, DataTableRequest())
        assert page.records_total == 1
        assert page_ids(page) == [catalog["novel"]]

    def test_draw_is_echoed(self, db, catalog):
        assert fetch_product_page(db, DataTableRequest(draw=42)).draw == 42
        assert fetch_product_page(db, DataTableRequest(draw="x-9")).draw == "x-9"

    def test_malformed_category_yields_empty_page(self, db, catalog):
        page = fetch_product_page(db, DataTableRequest(category_id="abc"))

        assert page.data == []
        assert page.records_total == 2
        assert page.records_filtered == 0

    def test_empty_store(self, db):
        page = fetch_product_page(db, DataTableRequest(search_term="anything"))
        assert (page.records_total, page.records_filtered, page.data) == (0, 0, [])


class TestSearchSemantics:
    """Search matches name, description, price text or category name."""

    @pytest.fixture
    def shop(self, db):
        db.add_all([Category(id=1, name="Audio"), Category(id=2, name="Stationery")])
        db.flush()
        db.add_all(
            [
                Product(id=1, name="Speaker", description="Bluetooth", price=Decimal("49.00"), category_id=1),
                Product(id=2, name="Headphones", description=None, price=Decimal("120.00"), category_id=1),
                Product(id=3, name="Notebook", description="A5, dotted", price=Decimal("7.00"), category_id=2),
                Product(id=4, name="Pen", description="blue ink", price=Decimal("3.00"), category_id=2),
            ]
        )
        db.commit()
        return {
            1: ("Speaker", "Bluetooth", "49.00", "Audio"),
            2: ("Headphones", "", "120.00", "Audio"),
            3: ("Notebook", "A5, dotted", "7.00", "Stationery"),
            4: ("Pen", "blue ink", "3.00", "Stationery"),
        }

    @pytest.mark.parametrize(
        "term",
        ["speaker", "BLUE", "audio", "o", "49", "49.00", "120.00", "7.00", "0.0", "stat", "dotted", "zzz"],
    )
    def test_result_set_matches_any_field(self, db, shop, term):
        expected = [
            product_id
            for product_id, fields in shop.items()
            if any(term.lower() in field.lower() for field in fields)
        ]
        page = fetch_product_page(db, DataTableRequest(search_term=term, length=None))

        assert page_ids(page) == expected
        assert page.records_filtered == len(expected)

    def test_price_is_searched_as_text(self, db, shop):
        page = fetch_product_page(db, DataTableRequest(search_term="9"))
        assert page_ids(page) == [1]

    def test_category_filter_bounds_results(self, db, shop):
        page = fetch_product_page(
            db, DataTableRequest(category_id="2", search_term="e", length=None)
        )

        assert all(row.category_id == 2 for row in page.data)
        assert page_ids(page) == [3, 4]
        assert page.records_filtered <= page.records_total


class TestPagingAndOrdering:
    """Pages are stable and complete for a fixed sort key."""

    NAMES = ["Delta", "alpha", "Charlie", "Alpha", "bravo", "Delta", "alpha"]

    @pytest.fixture
    def many(self, db):
        db.add(Category(id=1, name="Misc"))
        db.flush()
        db.add_all(
            [
                Product(id=i, name=name, price=Decimal(f"{i}.00"), category_id=1)
                for i, name in enumerate(self.NAMES, start=1)
            ]
        )
        db.commit()

    def full(self, db, order):
        return page_ids(fetch_product_page(db, DataTableRequest(order=order, length=None)))

    @pytest.mark.parametrize("length", [1, 2, 3, 7, 10])
    @pytest.mark.parametrize("direction", ["asc", "desc"])
    def test_concatenated_pages_reproduce_full_result(self, db, many, length, direction):
        order = [OrderSpec(column=1, dir=direction)]
        expected = self.full(db, order)

        collected = []
        start = 0
        while start < len(self.NAMES):
            page = fetch_product_page(
                db, DataTableRequest(start=start, length=length, order=order)
            )
            assert len(page.data) <= length
            collected.extend(page_ids(page))
            start += length

        assert collected == expected
        assert sorted(collected) == list(range(1, len(self.NAMES) + 1))

    def test_default_order_is_primary_key(self, db, many):
        assert self.full(db, []) == list(range(1, len(self.NAMES) + 1))

    def test_order_by_price_desc(self, db, many):
        assert self.full(db, [OrderSpec(column=3, dir="desc")]) == list(
            range(len(self.NAMES), 0, -1)
        )

    def test_ties_are_broken_by_id(self, db, many):
        ids = self.full(db, [OrderSpec(column=1, dir="asc")])
        delta = [i for i in ids if self.NAMES[i - 1] == "Delta"]
        assert delta == [1, 6]

    @pytest.mark.parametrize("column", [0, 4, 5, 99, -1])
    def test_non_orderable_columns_are_ignored(self, db, many, column):
        assert self.full(db, [OrderSpec(column=column, dir="desc")]) == list(
            range(1, len(self.NAMES) + 1)
        )

    def test_length_none_returns_all_rows(self, db, many):
        page = fetch_product_page(db, DataTableRequest(length=None))
        assert len(page.data) == len(self.NAMES)

    def test_offset_past_the_end(self, db, many):
        page = fetch_product_page(db, DataTableRequest(start=100, length=10))
        assert page.data == []
        assert page.records_filtered == len(self.NAMES)


class TestRowFormatting:
    def test_row_fields(self, db, catalog):
        page = fetch_product_page(db, DataTableRequest(search_term="phone"))
        row = page.data[0]

        assert row.name == "Phone"
        assert row.price == "599.00"
        assert row.category == "Electronics"
        assert row.category_id == 1
        assert [(a.operation, a.id) for a in row.actions] == [
            ("view", 1),
            ("edit", 1),
            ("delete", 1),
        ]

    def test_missing_category_uses_placeholder(self):
        product = Product(id=5, name="Orphan", description=None, price=Decimal("1.5"), category_id=99)

        row = format_product_row(product)

        assert row.category == PLACEHOLDER_CATEGORY == "-"
        assert row.price == "1.50"
        assert row.description is None

    def test_response_uses_protocol_keys(self, db, catalog):
        payload = fetch_product_page(db, DataTableRequest(draw=3)).model_dump(by_alias=True)
        assert set(payload) == {"draw", "recordsTotal", "recordsFiltered", "data"}


def test_column_declarations():
    declared = {c["data"]: (c["orderable"], c["searchable"]) for c in column_declarations()}

    assert [c.data for c in COLUMNS] == ["id", "name", "description", "price", "category", "actions"]
    assert declared["id"] == (False, False)
    assert declared["name"] == declared["description"] == declared["price"] == (True, True)
    assert declared["category"] == (False, True)
    assert declared["actions"] == (False, False)
