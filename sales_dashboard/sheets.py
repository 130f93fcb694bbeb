"""Google スプレッドシート (gviz) からの商品データ取得モジュール.

取得フロー:
  1. gviz エンドポイントから JSONP 形式のテキストを取得
  2. google.visualization.Query.setResponse(...) のラッパーを除去して JSON パース
  3. 各行のセルを列位置に従って ItemRecord に変換

列は位置で固定マッピングしている。シート側で列の並び替えが起きると
値が別フィールドに入ってしまうが、ここでは検知しない。
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any
from urllib.parse import quote

import requests

from sales_dashboard.config import GVIZ_URL_TEMPLATE, REQUEST_TIMEOUT, SHEET_ID, SHEET_NAME
from sales_dashboard.models import ItemRecord

logger = logging.getLogger(__name__)

# Date(2024,4,15) / Date(2024,4,15,10,30,0)（月は 0 始まり）
_GVIZ_DATE_PATTERN = re.compile(r"Date\((\d+),(\d+),(\d+)(?:,\d+)*\)")
_ENVELOPE_HEAD = re.compile(r"^[^(]*\(")
_ENVELOPE_TAIL = re.compile(r"\);?\s*$")
# カンマ除去後の数値表記（"1_000" や "0x10" は数値として扱わない）
_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

# シートの列順（0 始まり）
COLUMNS: tuple[str, ...] = (
    "id",
    "status",
    "source",
    "platform",
    "purchase_date",
    "title",
    "color",
    "category",
    "gender",
    "brand",
    "size",
    "selling_platform",
    "condition",
    "listed_date",
    "list_price",
    "sold_date",
    "sold_price",
    "fee",
    "shipping_cost",
    "net_amount",
    "cost",
    "tax",
    "photo_folder_url",
    "created_date",
    "note",
)

_DATE_FIELDS = {"purchase_date", "listed_date", "sold_date", "created_date"}
_NUMBER_FIELDS = {
    "list_price",
    "sold_price",
    "fee",
    "shipping_cost",
    "net_amount",
    "cost",
    "tax",
}


class SheetFetchError(Exception):
    """スプレッドシートの取得・デコードに失敗したことを表す."""


def build_sheet_url(sheet_id: str, sheet_name: str = "") -> str:
    """gviz JSON エンドポイントの URL を組み立てる."""
    url = GVIZ_URL_TEMPLATE.format(sheet_id=sheet_id)
    if sheet_name:
        url += f"&sheet={quote(sheet_name, safe='')}"
    return url


def fetch_feed_text(url: str) -> str:
    """gviz エンドポイントのレスポンス本文を取得する.

    リトライはしない。失敗時は SheetFetchError を送出する。
    """
    try:
        resp = requests.get(url, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        return resp.text
    except requests.RequestException as e:
        logger.error("スプレッドシート取得失敗: url=%s, error=%s", url, e)
        raise SheetFetchError("スプレッドシートの取得に失敗しました") from e


def strip_envelope(text: str) -> str:
    """setResponse(...) のラッパーを除去して JSON 部分だけを返す."""
    return _ENVELOPE_TAIL.sub("", _ENVELOPE_HEAD.sub("", text, count=1), count=1)


def decode_feed(text: str) -> dict:
    """gviz レスポンスを JSON としてデコードする."""
    try:
        data = json.loads(strip_envelope(text))
    except json.JSONDecodeError as e:
        logger.error("gviz JSON パースエラー: %s", e)
        raise SheetFetchError("レスポンスの JSON パースに失敗しました") from e

    if not isinstance(data, dict):
        raise SheetFetchError("レスポンスの形式が不正です")

    if data.get("status") == "error":
        reasons = [
            err.get("detailed_message") or err.get("reason")
            for err in data.get("errors") or []
            if isinstance(err, dict)
        ]
        logger.error("gviz エラーレスポンス: %s", reasons)
        raise SheetFetchError(f"スプレッドシートがエラーを返しました: {reasons}")

    table = data.get("table")
    if not isinstance(table, dict) or not isinstance(table.get("rows"), list):
        raise SheetFetchError("レスポンスに table.rows がありません")

    return data


def _cell_value(cell: Any) -> Any:
    if not isinstance(cell, dict):
        return None
    return cell.get("v")


def parse_gviz_date(cell: Any) -> str | None:
    """Date(年,月-1,日) 形式のセルを YYYY-MM-DD に変換する.

    値なし・形式不一致は None。
    """
    value = _cell_value(cell)
    if not value or not isinstance(value, str):
        return None
    m = _GVIZ_DATE_PATTERN.search(value)
    if not m:
        return None
    year, month, day = (int(g) for g in m.groups())
    return f"{year:04d}-{month + 1:02d}-{day:02d}"


def parse_number(cell: Any) -> int | float | None:
    """数値セルを変換する. カンマ区切りの文字列も受け付ける.

    空・欠損・数値として解釈できない値は None（0 にはしない）。
    """
    value = _cell_value(cell)
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        num = value
    elif isinstance(value, str):
        text = value.replace(",", "").strip()
        if not _NUMBER_PATTERN.match(text):
            return None
        try:
            num = int(text)
        except ValueError:
            try:
                num = float(text)
            except ValueError:
                return None
    else:
        return None

    if isinstance(num, float):
        if math.isnan(num) or math.isinf(num):
            return None
        if num.is_integer():
            return int(num)
    return num


def parse_string(cell: Any) -> str:
    """文字列セルを変換する. 欠損は空文字."""
    value = _cell_value(cell)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_row(cells: list[Any] | None) -> ItemRecord:
    """1行分のセル配列を ItemRecord に変換する."""
    cells = cells or []
    fields: dict[str, Any] = {}
    for i, name in enumerate(COLUMNS):
        cell = cells[i] if i < len(cells) else None
        if name in _DATE_FIELDS:
            fields[name] = parse_gviz_date(cell)
        elif name in _NUMBER_FIELDS:
            fields[name] = parse_number(cell)
        else:
            fields[name] = parse_string(cell)
    return ItemRecord(**fields)


def parse_rows(rows: list[dict]) -> list[ItemRecord]:
    """gviz の table.rows を ItemRecord のリストに変換する. 商品IDが空の行は除外."""
    records = [parse_row((row or {}).get("c")) for row in rows]
    items = [r for r in records if r.id]
    if len(items) < len(records):
        logger.debug("商品ID が空の行を除外: %d 件", len(records) - len(items))
    return items


def fetch_items(sheet_id: str | None = None, sheet_name: str | None = None) -> list[ItemRecord]:
    """スプレッドシートから全商品レコードを取得する.

    Raises:
        SheetFetchError: 取得・デコードに失敗した場合。部分的な結果は返さない。
    """
    sheet_id = sheet_id if sheet_id is not None else SHEET_ID
    sheet_name = sheet_name if sheet_name is not None else SHEET_NAME
    if not sheet_id:
        raise SheetFetchError("SHEET_ID が設定されていません")

    text = fetch_feed_text(build_sheet_url(sheet_id, sheet_name))
    data = decode_feed(text)
    items = parse_rows(data["table"]["rows"])
    logger.info("商品レコード取得: %d 件", len(items))
    return items
