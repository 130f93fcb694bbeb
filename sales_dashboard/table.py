"""商品一覧の絞り込み・並び替え・ページ分割モジュール."""

from __future__ import annotations

import math
import unicodedata
from dataclasses import dataclass, replace
from enum import Enum

from sales_dashboard.metrics import item_profit
from sales_dashboard.models import ItemRecord

PAGE_SIZE = 20

# カタカナ → ひらがな（ァ..ヶ を ぁ..ゖ へ）
_KATAKANA_TO_HIRAGANA = {code: code - 0x60 for code in range(0x30A1, 0x30F7)}


class SortKey(str, Enum):
    ID = "id"
    TITLE = "title"
    BRAND = "brand"
    CATEGORY = "category"
    SIZE = "size"
    STATUS = "status"
    LIST_PRICE = "list_price"
    SOLD_PRICE = "sold_price"
    PROFIT = "profit"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class FilterOptions:
    """絞り込みプルダウンの選択肢."""

    statuses: list[str]
    categories: list[str]
    brands: list[str]


@dataclass(frozen=True)
class Page:
    """ページ分割後の1ページ."""

    rows: list[ItemRecord]
    page: int  # 0 始まり
    total_pages: int
    total: int
    page_size: int = PAGE_SIZE

    @property
    def first(self) -> int:
        """表示中の先頭行番号（1 始まり）. 0 件なら 0."""
        return self.page * self.page_size + 1 if self.rows else 0

    @property
    def last(self) -> int:
        return self.page * self.page_size + len(self.rows)


def filter_items(
    items: list[ItemRecord],
    status: str = "",
    category: str = "",
    brand: str = "",
    keyword: str = "",
) -> list[ItemRecord]:
    """ステータス・カテゴリ・ブランドの完全一致と商品名のキーワード部分一致で絞り込む.

    空の条件は無視する。
    """
    kw = keyword.lower()
    result = []
    for item in items:
        if status and item.status != status:
            continue
        if category and item.category != category:
            continue
        if brand and item.brand != brand:
            continue
        if kw and kw not in item.title.lower():
            continue
        result.append(item)
    return result


def filter_options(items: list[ItemRecord]) -> FilterOptions:
    """絞り込み選択肢を全件から作る. ステータスは出現順、カテゴリ・ブランドは昇順."""
    statuses = list(dict.fromkeys(item.status for item in items if item.status))
    categories = sorted({item.category for item in items if item.category})
    brands = sorted({item.brand for item in items if item.brand})
    return FilterOptions(statuses=statuses, categories=categories, brands=brands)


def collation_key(text: str) -> tuple[str, str]:
    """日本語表示向けの文字列比較キー.

    全角/半角・大文字/小文字・カタカナ/ひらがなの違いを一次比較では無視し、
    同値の場合は元の文字列で順序を決める。
    """
    folded = unicodedata.normalize("NFKC", text).casefold().translate(_KATAKANA_TO_HIRAGANA)
    return folded, text


def sort_value(item: ItemRecord, key: SortKey):
    """並び替えに使う値. 利益は計算値、それ以外はフィールド値."""
    if key is SortKey.PROFIT:
        return item_profit(item)
    return getattr(item, key.value)


def sort_items(
    items: list[ItemRecord],
    key: SortKey = SortKey.ID,
    direction: SortDirection = SortDirection.DESC,
) -> list[ItemRecord]:
    """指定キーで並び替える. 値が None の商品は昇順・降順どちらでも末尾."""
    key = SortKey(key)
    present = [item for item in items if sort_value(item, key) is not None]
    missing = [item for item in items if sort_value(item, key) is None]

    def _key(item: ItemRecord):
        value = sort_value(item, key)
        if isinstance(value, str):
            return collation_key(value)
        return value

    present.sort(key=_key, reverse=SortDirection(direction) is SortDirection.DESC)
    return present + missing


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(count / page_size)


def clamp_page(page: int, pages: int) -> int:
    """ページ番号を [0, pages-1] に収める."""
    return max(0, min(page, pages - 1))


def paginate(items: list[ItemRecord], page: int = 0, page_size: int = PAGE_SIZE) -> Page:
    pages = total_pages(len(items), page_size)
    page = clamp_page(page, pages)
    start = page * page_size
    return Page(
        rows=items[start:start + page_size],
        page=page,
        total_pages=pages,
        total=len(items),
        page_size=page_size,
    )


@dataclass(frozen=True)
class TableState:
    """商品一覧の並び替え・ページ状態. 初期値は商品ID降順の先頭ページ."""

    key: SortKey = SortKey.ID
    direction: SortDirection = SortDirection.DESC
    page: int = 0

    def toggle_sort(self, key: SortKey) -> TableState:
        """同じキーなら昇順/降順を反転、別キーなら昇順で切り替える. ページは先頭に戻す."""
        key = SortKey(key)
        if key is self.key:
            direction = SortDirection.ASC if self.direction is SortDirection.DESC else SortDirection.DESC
            return replace(self, direction=direction, page=0)
        return replace(self, key=key, direction=SortDirection.ASC, page=0)

    def next_page(self, pages: int) -> TableState:
        return replace(self, page=clamp_page(self.page + 1, pages))

    def prev_page(self, pages: int) -> TableState:
        return replace(self, page=clamp_page(self.page - 1, pages))


def build_table(items: list[ItemRecord], state: TableState = TableState()) -> Page:
    """状態に従って並び替え・ページ分割した1ページを返す."""
    return paginate(sort_items(items, state.key, state.direction), state.page)
