from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

HEADERS = [
    "序號",
    "抽籤日期",
    "證券名稱",
    "證券代號",
    "發行市場",
    "申購開始日",
    "申購結束日",
    "承銷股數",
    "實際承銷股數",
    "承銷價(元)",
    "實際承銷價(元)",
    "撥券日期(上市、上櫃日期)",
    "主辦券商",
    "申購股數",
    "總承銷金額(元)",
    "總合格件",
    "中籤率(%)",
    "取消公開抽籤",
]

TODAY = date(2026, 3, 1)


def csv_line(values: list[str]) -> str:
    cells = []
    for value in values:
        if "," in value or '"' in value:
            value = '"' + value.replace('"', '""') + '"'
        cells.append(value)
    return ",".join(cells)


def header_line(headers: list[str] | None = None) -> str:
    return csv_line(headers or HEADERS)


def data_line(headers: list[str] | None = None, **by_header: str) -> str:
    """Build a data line; keyword names are the Chinese header texts."""

    headers = headers or HEADERS
    return csv_line([by_header.get(header, "") for header in headers])


def row(**values: str) -> str:
    defaults = {
        "序號": "1",
        "抽籤日期": "115/03/10",
        "證券名稱": "測試科技",
        "證券代號": "2345",
        "發行市場": "上市",
        "申購開始日": "115/03/02",
        "申購結束日": "115/03/04",
        "承銷股數": "1,200,000",
        "實際承銷股數": "1,180,000",
        "承銷價(元)": "35.00",
        "實際承銷價(元)": "36.50",
        "撥券日期(上市、上櫃日期)": "115/03/16",
        "主辦券商": "元大",
        "申購股數": "1000",
        "總承銷金額(元)": "43,070,000",
        "總合格件": "52,311",
        "中籤率(%)": "2.25",
        "取消公開抽籤": "",
    }
    defaults.update(values)
    return data_line(**defaults)


def response(status_code: int = 200, *, json_data=None, content: bytes = b"", text: str = ""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = "OK" if status_code < 400 else "Bad Request"
    resp.content = content
    resp.text = text
    resp.json.return_value = json_data
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return resp


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def session() -> MagicMock:
    mock = MagicMock()
    mock.headers = {}
    return mock
