"""table モジュールのユニットテスト."""

from sales_dashboard.models import STATUS_CARD_CREATED, STATUS_COMPLETED, STATUS_LISTED, ItemRecord
from sales_dashboard.table import (
    PAGE_SIZE,
    SortDirection,
    SortKey,
    TableState,
    build_table,
    clamp_page,
    collation_key,
    filter_items,
    filter_options,
    paginate,
    sort_items,
)

ITEMS = [
    ItemRecord(id="K-0003", status=STATUS_LISTED, title="ナイキ パーカー", category="パーカー",
               brand="NIKE", list_price=4800),
    ItemRecord(id="K-0001", status=STATUS_COMPLETED, title="Adidas Track Jacket", category="ジャケット",
               brand="adidas", list_price=3980, sold_price=3500, net_amount=3000, cost=1200, tax=120),
    ItemRecord(id="K-0004", status=STATUS_CARD_CREATED, title="無地 Tシャツ", category="",
               brand="", list_price=None),
    ItemRecord(id="K-0002", status=STATUS_COMPLETED, title="NIKE エアマックス", category="スニーカー",
               brand="NIKE", list_price=9800, sold_price=9000, net_amount=8000, cost=None),
]


def _ids(items):
    return [i.id for i in items]


class TestFilterItems:
    """filter_items のテスト."""

    def test_no_filters_keeps_order(self):
        assert filter_items(ITEMS) == ITEMS

    def test_status(self):
        assert _ids(filter_items(ITEMS, status=STATUS_COMPLETED)) == ["K-0001", "K-0002"]

    def test_category(self):
        assert _ids(filter_items(ITEMS, category="パーカー")) == ["K-0003"]

    def test_brand_exact(self):
        assert _ids(filter_items(ITEMS, brand="NIKE")) == ["K-0003", "K-0002"]
        assert filter_items(ITEMS, brand="nike") == []

    def test_keyword_case_insensitive(self):
        assert _ids(filter_items(ITEMS, keyword="nike")) == ["K-0002"]
        assert _ids(filter_items(ITEMS, keyword="TRACK")) == ["K-0001"]

    def test_keyword_no_match(self):
        assert filter_items(ITEMS, keyword="存在しない商品") == []

    def test_conjunction(self):
        assert _ids(filter_items(ITEMS, status=STATUS_COMPLETED, brand="NIKE")) == ["K-0002"]
        assert filter_items(ITEMS, status=STATUS_LISTED, category="スニーカー") == []


class TestFilterOptions:
    """filter_options のテスト."""

    def test_options(self):
        options = filter_options(ITEMS)

        assert options.statuses == [STATUS_LISTED, STATUS_COMPLETED, STATUS_CARD_CREATED]
        assert options.categories == sorted(["パーカー", "ジャケット", "スニーカー"])
        assert options.brands == ["NIKE", "adidas"]


class TestSortItems:
    """sort_items のテスト."""

    def test_default_id_desc(self):
        assert _ids(sort_items(ITEMS)) == ["K-0004", "K-0003", "K-0002", "K-0001"]

    def test_numeric_asc(self):
        result = sort_items(ITEMS, SortKey.LIST_PRICE, SortDirection.ASC)
        assert _ids(result) == ["K-0001", "K-0003", "K-0002", "K-0004"]

    def test_nulls_last_both_directions(self):
        asc = sort_items(ITEMS, SortKey.SOLD_PRICE, SortDirection.ASC)
        desc = sort_items(ITEMS, SortKey.SOLD_PRICE, SortDirection.DESC)

        assert _ids(asc)[:2] == ["K-0001", "K-0002"]
        assert _ids(desc)[:2] == ["K-0002", "K-0001"]
        assert {i.sold_price for i in asc[2:]} == {None}
        assert {i.sold_price for i in desc[2:]} == {None}

    def test_undefined_profit_sorts_last(self):
        result = sort_items(ITEMS, SortKey.PROFIT, SortDirection.DESC)

        assert result[0].id == "K-0001"
        assert "K-0002" in _ids(result[1:])

    def test_reverse_on_toggle(self):
        asc = sort_items(ITEMS, SortKey.ID, SortDirection.ASC)
        desc = sort_items(ITEMS, SortKey.ID, SortDirection.DESC)
        assert asc == list(reversed(desc))

    def test_reverse_on_toggle_numeric_keeps_nulls_last(self):
        asc = sort_items(ITEMS, SortKey.LIST_PRICE, SortDirection.ASC)
        desc = sort_items(ITEMS, SortKey.LIST_PRICE, SortDirection.DESC)

        assert _ids(asc) == ["K-0001", "K-0003", "K-0002", "K-0004"]
        assert _ids(desc) == ["K-0002", "K-0003", "K-0001", "K-0004"]
        assert asc[:3] == list(reversed(desc[:3]))

    def test_string_collation(self):
        items = [
            ItemRecord(id="1", status="", brand="ナイキ"),
            ItemRecord(id="2", status="", brand="あしっくす"),
            ItemRecord(id="3", status="", brand="えどうぃん"),
            ItemRecord(id="4", status="", brand="アディダス"),
        ]
        result = sort_items(items, SortKey.BRAND, SortDirection.ASC)
        assert [i.brand for i in result] == ["あしっくす", "アディダス", "えどうぃん", "ナイキ"]

    def test_collation_key_width_and_case(self):
        assert collation_key("ＮＩＫＥ")[0] == collation_key("nike")[0]
        assert collation_key("ｱﾃﾞｨﾀﾞｽ")[0] == collation_key("あでぃだす")[0]

    def test_empty_string_is_not_null(self):
        result = sort_items(ITEMS, SortKey.CATEGORY, SortDirection.ASC)
        assert result[0].id == "K-0004"


class TestTableState:
    """TableState のテスト."""

    def test_default(self):
        state = TableState()
        assert state.key is SortKey.ID
        assert state.direction is SortDirection.DESC
        assert state.page == 0

    def test_toggle_same_key(self):
        state = TableState(page=3).toggle_sort(SortKey.ID)
        assert state.direction is SortDirection.ASC
        assert state.page == 0
        assert state.toggle_sort(SortKey.ID).direction is SortDirection.DESC

    def test_toggle_other_key(self):
        state = TableState(direction=SortDirection.DESC, page=2).toggle_sort(SortKey.PROFIT)
        assert state.key is SortKey.PROFIT
        assert state.direction is SortDirection.ASC
        assert state.page == 0

    def test_page_navigation_clamps(self):
        state = TableState()
        assert state.prev_page(3).page == 0
        state = state.next_page(3).next_page(3).next_page(3)
        assert state.page == 2


class TestPaginate:
    """paginate / build_table のテスト."""

    def _many(self, n):
        return [ItemRecord(id=f"K-{i:04d}", status=STATUS_LISTED) for i in range(n)]

    def test_pages(self):
        items = self._many(45)
        page = paginate(items, 1)

        assert page.total_pages == 3
        assert page.total == 45
        assert len(page.rows) == PAGE_SIZE
        assert page.first == 21
        assert page.last == 40

    def test_last_page(self):
        page = paginate(self._many(45), 2)
        assert len(page.rows) == 5
        assert page.last == 45

    def test_out_of_range_page(self):
        assert paginate(self._many(45), 99).page == 2
        assert paginate(self._many(45), -1).page == 0

    def test_empty(self):
        page = paginate([], 0)
        assert page.rows == []
        assert page.total_pages == 0
        assert page.first == 0

    def test_clamp_page(self):
        assert clamp_page(5, 3) == 2
        assert clamp_page(0, 0) == 0

    def test_build_table_default(self):
        page = build_table(self._many(25))
        assert page.rows[0].id == "K-0024"
        assert len(page.rows) == PAGE_SIZE
