"""Text canonicalization for product labels."""

import re
from typing import Any

# Full-width digit -> ASCII digit
FULLWIDTH_DIGIT_OFFSET = 0xFEE0

# Unit markers that follow a quantity, case-sensitive; longest first so
# "500ml" is consumed as a whole rather than leaving "l"
UNIT_MARKERS = ("kg", "Kg", "ml", "ML", "mL", "g", "G", "l", "L")

# Promotional / packaging qualifiers; "お徳用" before "徳用" so no stray "お" is left
QUALIFIER_WORDS = ("お徳用", "徳用", "業務用", "大容量")

# Internal marker for intermediate components
INTERMEDIATE_MARKER = "【P】"

# Product-type nouns stripped to get a brand core
CATEGORY_SUFFIXES = (
    "ドレッシング",
    "マヨネーズ",
    "ケチャップ",
    "フレーク",
    "ペースト",
    "カレー",
    "ソース",
    "スープ",
    "ルウ",
    "ルー",
    "だし",
    "タレ",
    "たれ",
)

DAKUTEN_MAP = {
    # Hiragana
    "が": "か", "ぎ": "き", "ぐ": "く", "げ": "け", "ご": "こ",
    "ざ": "さ", "じ": "し", "ず": "す", "ぜ": "せ", "ぞ": "そ",
    "だ": "た", "ぢ": "ち", "づ": "つ", "で": "て", "ど": "と",
    "ば": "は", "び": "ひ", "ぶ": "ふ", "べ": "へ", "ぼ": "ほ",
    "ぱ": "は", "ぴ": "ひ", "ぷ": "ふ", "ぺ": "へ", "ぽ": "ほ",
    # Katakana
    "ガ": "カ", "ギ": "キ", "グ": "ク", "ゲ": "ケ", "ゴ": "コ",
    "ザ": "サ", "ジ": "シ", "ズ": "ス", "ゼ": "セ", "ゾ": "ソ",
    "ダ": "タ", "ヂ": "チ", "ヅ": "ツ", "デ": "テ", "ド": "ト",
    "バ": "ハ", "ビ": "ヒ", "ブ": "フ", "ベ": "ヘ", "ボ": "ホ",
    "パ": "ハ", "ピ": "ヒ", "プ": "フ", "ペ": "ヘ", "ポ": "ホ",
    "ヴ": "ウ",
}  # fmt: skip

_WHITESPACE = re.compile(r"\s+")
_FULLWIDTH_DIGITS = re.compile(r"[０-９]")
_QUANTITY_TOKEN = re.compile(r"\d+(?:" + "|".join(UNIT_MARKERS) + ")")
_QUALIFIERS = re.compile("|".join(QUALIFIER_WORDS))
_CATEGORY = re.compile("|".join(CATEGORY_SUFFIXES))
_DAKUTEN_TABLE = str.maketrans(DAKUTEN_MAP)


def _to_text(raw: Any) -> str:
    if raw is None:
        return ""
    return raw if isinstance(raw, str) else str(raw)


def _normalize_once(s: str) -> str:
    s = _WHITESPACE.sub("", s)
    s = _FULLWIDTH_DIGITS.sub(lambda m: chr(ord(m.group()) - FULLWIDTH_DIGIT_OFFSET), s)
    s = _QUANTITY_TOKEN.sub("", s)
    s = _QUALIFIERS.sub("", s)
    return s.replace(INTERMEDIATE_MARKER, "")


def normalize(raw: Any) -> str:
    """Canonicalize a label for comparison.

    Removes all whitespace (including U+3000), folds full-width digits to
    ASCII, drops quantity tokens such as "1kg" or "500ml", drops packaging
    qualifiers (徳用, 業務用, ...) and the 【P】 marker.

    The pipeline is re-applied until the text stops changing: a deletion can
    splice a new token together ("1徳用kg" -> "1kg"), and a single pass would
    then not be idempotent. Every step only deletes or maps characters, so
    the loop terminates.
    """
    s = _to_text(raw)
    while True:
        result = _normalize_once(s)
        if result == s:
            return result
        s = result


def remove_dakuten(s: Any) -> str:
    """Fold voiced/semi-voiced kana to the unvoiced base character."""
    return _to_text(s).translate(_DAKUTEN_TABLE)


def strip_category_suffixes(s: str) -> str:
    """Remove product-type vocabulary wherever it occurs."""
    return _CATEGORY.sub("", s)


def extract_brand(raw: Any) -> str:
    """Brand core of a label: normalized, product-type words removed, dakuten folded.

    Example: "ジャワカレー" and "ジャワフレーク" both give "シャワ".
    """
    return remove_dakuten(strip_category_suffixes(normalize(raw)))
