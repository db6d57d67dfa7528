"""巴西本地化数字的解析与格式化

输入框中的金额与比例使用 ``.`` 作为千位分隔符、``,`` 作为小数分隔符
（例如 ``"1.250,50"``）。本模块负责在这种文本和 Decimal 之间转换，
以及输入过程中的掩码处理。

约定：
- 解析永不抛异常，空串或无法解析时返回调用方给定的默认值
- 小数位截断只发生在输入掩码阶段，解析时保留全部精度
"""
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

Number = Union[Decimal, int, float]

# 与 JS parseFloat 一致：只取最长的数字前缀
_NUMBER_PREFIX = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")

_CENT = Decimal("0.01")


def parse_locale_number(text, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """把本地化文本解析为 Decimal

    算法：去掉所有 ``.``，第一个 ``,`` 视为小数点，其后的逗号直接丢弃
    （剩余数字全部并入小数部分）。

    Args:
        text: 本地化文本；已经是数字时原样转换为 Decimal
        default: 空串或无法解析时的返回值。写库时传 None，计算时传 Decimal(0)

    Returns:
        解析结果或 default
    """
    if text is None or isinstance(text, bool):
        return default
    if isinstance(text, Decimal):
        return text if text.is_finite() else default
    if isinstance(text, (int, float)):
        value = Decimal(str(text))
        return value if value.is_finite() else default

    cleaned = str(text).strip().replace(".", "")
    if "," in cleaned:
        head, _, tail = cleaned.partition(",")
        cleaned = f"{head}.{tail.replace(',', '')}"

    match = _NUMBER_PREFIX.match(cleaned)
    if not match:
        return default
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return default


def to_number(text) -> Decimal:
    """计算用的解析：无法解析时为 0"""
    return parse_locale_number(text, default=Decimal(0))


def format_currency_number(value: Optional[Number]) -> str:
    """金额 -> 输入框文本，固定两位小数，不带千位分隔（1250 -> "1250,00"）"""
    if value is None:
        return ""
    quantized = Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{quantized:.2f}".replace(".", ",")


def format_rate_number(value: Optional[Number]) -> str:
    """比例 -> 输入框文本，小数位数不固定（0.5 -> "0,5"）"""
    if value is None:
        return ""
    normalized = Decimal(str(value)).normalize()
    return format(normalized, "f").replace(".", ",")


def format_grouped(value: Number) -> str:
    """带千位分隔的两位小数（1250 -> "1.250,00"）"""
    quantized = Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    text = f"{quantized:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_brl(value: Optional[Number]) -> str:
    """展示用的雷亚尔金额（R$ 1.250,00）"""
    return f"R$ {format_grouped(value or 0)}"


# ==================== 输入掩码 ====================

def _collapse_commas(text: str) -> str:
    parts = text.split(",")
    if len(parts) > 2:
        return f"{parts[0]},{''.join(parts[1:])}"
    return text


def mask_rate_input(raw: Optional[str]) -> str:
    """比例输入掩码：只保留数字和一个逗号"""
    if not raw:
        return ""
    return _collapse_commas(re.sub(r"[^\d,]", "", raw))


def mask_currency_input(raw: Optional[str]) -> str:
    """金额输入掩码：只保留数字和一个逗号，小数最多两位"""
    clean = mask_rate_input(raw)
    integer, sep, decimal = clean.partition(",")
    if sep and len(decimal) > 2:
        return f"{integer},{decimal[:2]}"
    return clean

