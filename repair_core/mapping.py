# repair_core/mapping.py
# Spreadsheet column labels <-> record fields

FIELD_WORK_ATTRIBUTE = "工作屬性"
FIELD_REQUEST_DATE = "請修日期"
FIELD_REQUEST_TIME = "請修時間"
FIELD_FAULT_DESCRIPTION = "故障描述"
FIELD_HANDLING_STATUS = "處理情形"

# Export sheet: column label -> record field (derived columns are formatted in io_excel)
ORDER_OUTCOLS = [
    ("工作屬性", "work_attribute"),
    ("請修日期", "request_date"),
    ("請修時間", "request_time"),
    ("故障描述", "fault_description"),
    ("處理情形", "handling_status"),
    ("場域", "venue"),
    ("區域", "area"),
    ("基礎分類", "work_type_classification"),
    ("故障標籤", "fault_tags"),
    ("使用材料", "materials_used"),
]

RECORDS_SHEET = "維修紀錄"
SUMMARY_SHEET = "統計結果 (基於篩選)"
