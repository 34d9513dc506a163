# どこで: `src/dialkit/interactive/panel_gui/snippet.py`。
# 何を: パネルの現在値から「コピペ可能な指示テキスト」を生成する純粋関数を提供する。
# なぜ: UI（imgui）から分離し、出力仕様をユニットテストで担保するため。

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from dialkit.core.codec import to_plain


def values_snippet(panel_name: str, values: Mapping[str, Any]) -> str:
    """パネルの値を JSON で埋め込んだ指示テキストを返す。

    Notes
    -----
    JSON は 2 スペースインデント。JSON にできない値は TypeError。
    """

    json_text = json.dumps(to_plain(dict(values)), ensure_ascii=False, indent=2)
    return (
        f'Update the create_dial_kit configuration for "{panel_name}" with these values:\n'
        "\n"
        "```json\n"
        f"{json_text}\n"
        "```\n"
        "\n"
        "Apply these values as the new defaults in the create_dial_kit call."
    )


def next_preset_name(presets: Sequence[Any]) -> str:
    """次に保存するプリセットの既定名を返す（ベース状態が "Version 1"）。"""

    return f"Version {len(presets) + 2}"


__all__ = ["values_snippet", "next_preset_name"]
