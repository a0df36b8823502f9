from __future__ import annotations

import pytest

from src.transaction.markup import SoupDocument, parse_home_page_html


# bytes 0..31, so key_bytes[i] == i.
VERIFICATION_KEY = "AAECAwQFBgcICQoLDA0ODxAREhMUFRYXGBkaGxwdHh8="

# key_bytes[5] % 4 == 1 selects the second frame, key_bytes[2] % 16 == 2 the third row.
SELECTED_ROW = [255, 0, 16, 10, 20, 30, 128, 50, 100, 150, 200]


def _frame(index: int, path_data: str) -> str:
    return f"""
    <div id="loading-x-anim-{index}">
      <svg>
        <path d="M 0,0 L 1,1"></path>
        <path d="{path_data}"></path>
      </svg>
    </div>
    """


def _path_data(rows: list[list[int]]) -> str:
    return "M 10,30 C" + "C".join(" " + " ".join(str(value) for value in row) for row in rows)


FRAME_ROWS = [
    [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11],
    [12, 13, 14, 15, 16, 17, 18, 19, 20, 21, 22],
    SELECTED_ROW,
]
DECOY_ROWS = [[9, 9, 9, 9, 9, 9, 9, 9, 9, 9, 9]] * 3

HOME_PAGE_HTML = f"""
<html>
  <head>
    <meta name="twitter-site-verification" content="{VERIFICATION_KEY}" />
    <script>window.__SCRIPTS = {{"ondemand.s":"2f0364d"}};</script>
  </head>
  <body>
    {_frame(0, _path_data(DECOY_ROWS))}
    {_frame(1, _path_data(FRAME_ROWS))}
    {_frame(2, _path_data(DECOY_ROWS))}
    {_frame(3, _path_data(DECOY_ROWS))}
  </body>
</html>
"""

# Row index from key_bytes[2]; key_bytes[16] % 16 == 0 pins the frame time to zero.
ONDEMAND_SCRIPT = "var a=(n[2], 16),b=(n[16], 16),c=(n[7], 16);"
ONDEMAND_SCRIPT_NONZERO_TIME = "var a=(n[2], 16),b=(n[3], 16),c=(n[4], 16);"

# from_color of SELECTED_ROW, identity rotation matrix, trailing zeros.
EXPECTED_ANIMATION_KEY = "ff" + "0" + "10" + "1" + "0" + "0" + "1" + "0" + "0"


@pytest.fixture
def home_page() -> SoupDocument:
    return parse_home_page_html(HOME_PAGE_HTML)
