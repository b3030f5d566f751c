# repair_core/openai_helpers.py
from __future__ import annotations

import os
from typing import Any, List, Optional

from openai import OpenAI

from .analytics import (
    COL_COUNT,
    COL_NAME,
    COL_QUANTITY,
    RecordFilter,
    area_hotspots,
    fault_type_counts,
    material_usage,
    top_area_fault_breakdown,
)
from .quantity import format_quantity

_CLIENT = None
_DEFAULT_MODEL = "gpt-4o-mini"

NO_DATA_MESSAGE = "目前篩選條件下無資料可供分析以產生維護建議。請調整篩選或上傳更多資料。"
NONE_YET = "尚無資料"


# ----------------------------
# Client
# ----------------------------
def _ensure_openai():
    global _CLIENT
    if _CLIENT is not None:
        return _CLIENT
    api_key = os.environ.get("OPENAI_API_KEY", "").strip()
    if not api_key:
        raise RuntimeError("環境變數中缺少 OPENAI_API_KEY。")
    _CLIENT = OpenAI(api_key=api_key)
    return _CLIENT


def _to_text(x: Any) -> str:
    if x is None or (isinstance(x, float) and x != x):
        return ""
    return str(x).strip()


# ----------------------------
# Prompt
# ----------------------------
_REPORT_TEMPLATE = """\
一、潛在風險與根本原因推論
    (一) 針對 [高發故障類型A]
        1.  可能原因
            (1) [根據數據推測，例如：某區域的[高發故障類型A]可能與[推測原因1]有關]
            (2) [推測原因2]
        2.  潛在風險
            (1) [說明]
    (二) 針對熱點區域 [區域X] 的 [特定故障Y]
        1.  可能原因
            (1) [例如：D區的堵塞問題頻繁，可能指示該區域的污水幹管存在淤積或設計不良]
        2.  建議行動
            (1) [例如：建議對D區污水幹管進行內視鏡檢查]
二、預防性維護措施建議
    (一) 巡檢重點調整
        1.  針對 [高發區域A]
            (1) [建議巡檢項目]
        2.  針對 [高發故障類型B]
            (1) [建議巡檢頻率或方法]
    (二) 材料庫存與採購優化
        1.  根據 [常用材料C] 的高消耗量，建議 [庫存調整策略]
三、長期維護策略優化方向
    (一) [例如：考慮對[特定老舊設施/區域]進行預算編列以進行系統性更新]
    (二) [例如：建議引入[新技術/方法]以改善[特定問題]的維護效率]"""


def _join_counts(df, value_col: str = COL_COUNT, fmt: str = "{name} ({value}次)", sep: str = "；") -> str:
    parts = [
        fmt.format(name=n, value=format_quantity(v) if value_col == COL_QUANTITY else int(v))
        for n, v in zip(df[COL_NAME], df[value_col])
    ]
    return sep.join(parts) or NONE_YET


def build_data_summary(records: List) -> str:
    """Pre-aggregated counts the model reasons over; never raw rows."""
    lines = [f"目前分析了 {len(records)} 筆維修紀錄。"]
    lines.append("主要故障類型統計：" + _join_counts(fault_type_counts(records).head(5)))
    lines.append("故障高發區域統計：" + _join_counts(area_hotspots(records).head(5)))
    lines.append(
        "常用維修材料統計："
        + _join_counts(material_usage(records).head(5), COL_QUANTITY, "{name} (用量{value})")
    )
    lines.append("")
    lines.append("故障高發熱區詳細故障類型：")
    for area in top_area_fault_breakdown(records):
        faults = area["faults"]
        detail = _join_counts(faults, sep=", ") if not faults.empty else "無詳細故障分類"
        lines.append(f"- {area['area']} (總計 {area['total']} 次)：{detail}")
    return "\n".join(lines)


def build_maintenance_prompt(records: List, record_filter: Optional[RecordFilter] = None) -> str:
    record_filter = record_filter or RecordFilter()
    filter_lines = "\n".join(f"- {k}：{v}" for k, v in record_filter.describe().items())
    return (
        "作為設施維護專家，請根據以下維修數據摘要和詳細數據，提供深入的預防性維護建議、"
        "潛在風險推論、以及可能的優化方向。請以繁體中文提供清晰的階層式條列建議，"
        "嚴格依照以下編號格式與適當縮排： 一、 (一) 1. (1) a. (a)，避免過度使用粗體。\n\n"
        f"維修數據摘要：\n{build_data_summary(list(records))}\n\n"
        f"篩選條件：\n{filter_lines}\n\n"
        "請專注於從數據中推斷圖表可能未直接顯示的潛在問題或根本原因。例如，若某區域特定類型故障"
        "（如堵塞）頻繁，請推測可能的深層原因（如該區域管線老化或設計問題）並提出具體檢查或改進建議。\n\n"
        f"建議報告格式範例（請嚴格遵守此階層編號與縮排）：\n{_REPORT_TEMPLATE}\n"
    )


# ----------------------------
# Call
# ----------------------------
def llm_maintenance_suggestions(prompt: str, model: Optional[str] = None) -> str:
    """
    Free-text suggestions for the prompt. The answer is returned as is.
    Raises RuntimeError on any client/API failure or an empty answer.
    """
    client = _ensure_openai()
    model = model or os.environ.get("OPENAI_MODEL", _DEFAULT_MODEL)
    try:
        rsp = client.chat.completions.create(
            model=model,
            temperature=0.3,
            messages=[
                {"role": "system", "content": "你是設施維護與可靠度分析專家。"},
                {"role": "user", "content": prompt},
            ],
        )
        txt = _to_text(rsp.choices[0].message.content)
    except Exception as e:
        raise RuntimeError(f"智能分析失敗: {e}") from e
    if not txt:
        raise RuntimeError("智能分析失敗: 模型未回傳內容。")
    return txt


def maintenance_suggestions(records: List, record_filter: Optional[RecordFilter] = None,
                            model: Optional[str] = None) -> str:
    """Fixed message when there is nothing to analyse; otherwise one model call."""
    records = list(records)
    if not records:
        return NO_DATA_MESSAGE
    return llm_maintenance_suggestions(build_maintenance_prompt(records, record_filter), model=model)
