# repair_core/constants.py
"""
Fixed lookup tables for venue/area tagging, work-type mapping and the
material extraction rules.

Tables whose iteration order decides matching precedence are tuples, not
dicts, so the order is part of the value.
"""
from __future__ import annotations

# ============================================================================
# VENUES & AREAS
# ============================================================================
VENUE_NORTH = "北館"
VENUE_SOUTH = "南館"
VENUE_UNKNOWN = "未知場域"

# (keyword, venue) - first hit wins
VENUE_KEYWORDS = (
    ("北館", VENUE_NORTH),
    ("南館", VENUE_SOUTH),
)

UNIDENTIFIABLE_AREA_TAG = "無法識別"

NORTH_AREA_KEYWORDS = (
    ("A區", "A區"), ("B區", "B區"), ("C區", "C區"), ("D區", "D區"),
    ("E區", "E區"), ("F區", "F區"), ("G區", "G區"), ("I區", "I區"),
    ("P區", "P區"), ("戶外", "戶外"),
)

# Compound directions must stay ahead of the simple ones ("東北側" contains "北側").
SOUTH_AREA_KEYWORDS = (
    ("中庭", "中庭"),
    ("東南側", "東南側"), ("東南", "東南側"),
    ("西南側", "西南側"), ("西南", "西南側"),
    ("東北側", "東北側"), ("東北", "東北側"),
    ("西北側", "西北側"), ("西北", "西北側"),
    ("東側", "東側"), ("西側", "西側"), ("南側", "南側"), ("北側", "北側"),
    ("戶外", "戶外"),
)

AREA_KEYWORDS_BY_VENUE = {
    VENUE_NORTH: NORTH_AREA_KEYWORDS,
    VENUE_SOUTH: SOUTH_AREA_KEYWORDS,
}

# Dropdown options shown for each venue, before areas found in data are added
NORTH_AREAS_FOR_DROPDOWN = ["A區", "B區", "C區", "D區", "E區", "F區", "G區", "I區", "P區", "戶外"]
SOUTH_AREAS_FOR_DROPDOWN = ["北側", "南側", "東側", "西側", "中庭", "戶外"]

# ============================================================================
# WORK TYPES
# ============================================================================
WORK_TYPE_OTHER = "其他"
WORK_TYPE_MAP = {"水": "水", "電": "電", "營繕": "營繕", "消防": "消防"}
WORK_TYPES = ("水", "電", "消防", "營繕", WORK_TYPE_OTHER)

# ============================================================================
# FAULT TAGS
# ============================================================================
UNCLASSIFIED_FAULT_TAG = "未分類故障"
LEGACY_UNCLASSIFIED_FAULT_TAG = "其他/未分類 (舊)"

# ============================================================================
# VALIDATION
# ============================================================================
ERR_MISSING_WORK_ATTRIBUTE = "缺少「工作屬性」"
ERR_BAD_REQUEST_DATE = "「請修日期」格式錯誤或缺少"

# ============================================================================
# MATERIAL EXTRACTION
# ============================================================================
DEFAULT_UNIT = "個"

MULTIPLY_MARKERS = "*xXｘＸ＊"

# Split on these unless "各" (each) sits directly next to the separator
SEGMENT_SEPARATORS = ("、", "&", "以及", "與", "及")

# Longer verbs first so "更換了" is not cut down to "了"
LEADING_VERBS = (
    "拆除並更新", "已更換", "更換了", "已用", "更換", "使用", "安裝", "已將",
    "將", "把", "計", "更新", "換裝", "新裝", "加裝", "拆換", "調整", "清潔",
    "修復", "處理",
)

TRAILING_QUALIFIERS = ("等材料", "等零件")
TRAILING_PHRASES = (
    r"將.*?重新配管", r"將.*?疏通", "測試正常", "恢復正常", "完成", "修復",
    "處理完畢", "功能正常", "等作業", "等調整", "等事項", "等工作",
)

# Characters allowed after a managed name for the fragment to count as that material
BENIGN_REMAINDER_CHARS = r"""-(\sA-Za-z0-9_½¼¾"'.呎/#*:,+\\"""

# Bare stems that name a material type without the completing size suffix
INCOMPLETE_MATERIAL_STEMS = (
    "LED燈泡", "LED燈管", "T5燈管", "日光燈", "PL燈", "BB燈", "CCFL燈", "探照燈",
    "緊急照明燈", "燈泡", "燈管", "燈座", "龍頭", "水龍頭", "閥", "球閥", "球塞閥",
    "馬桶", "電線", "開關", "插座", "風扇", "馬達", "泵浦", "油漆", "水泥", "磁磚",
    "玻璃", "木板", "板材", "角材", "螺絲", "螺帽", "墊片", "軟管", "水管", "鉄管",
    "鐵管", "PVC管", "ABS管", "不鏽鋼管", "不銹鋼管", "高壓軟管", "三角凡而", "立栓",
    "壁栓", "混合龍頭", "沖洗器", "沖水閥", "浮球", "落水頭", "排水管", "排風扇",
    "抽風機", "斷路器", "無熔絲開關", "電磁開關", "安定器", "啟動器", "變壓器", "電池",
    "軸承", "皮帶", "濾網", "濾心", "矽利康", "填縫劑", "黏著劑", "接著劑", "潤滑油",
    "清潔劑", "消毒水", "除草劑", "殺蟲劑", "兩件式坐式馬桶", "制水電磁閥",
)

# ---- Data-quality patches for observed bad inputs (not general rules) ----

# A phrase that was pasted twice back-to-back in the source sheets
DUPLICATED_PHRASE_FIXES = (
    ("更換RO管更換RO管", "更換RO管"),
)

# Hose + wire pair whose embedded size the quantity parser splits wrongly
HOSE_WIRE_COMPOUND = 'PT高壓軟管-½"白扁線-2.0mm*2C'
HOSE_WIRE_PARTS = ('PT高壓軟管-½"', "白扁線-2.0mm*2C")

# Toilet fixtures whose quantity gets over-counted by trailing numbers
TOILET_FIXTURE_NAMES = ("兩件式坐式馬桶", "兩件式馬桶")
TOILET_MENTION_PATTERN = r"兩件式(?:坐式)?馬桶"
