# app.py - 維修紀錄分析系統
from __future__ import annotations

import io
import os

import plotly.express as px
import streamlit as st

from repair_core.analytics import (
    COL_COUNT,
    COL_NAME,
    COL_QUANTITY,
    RecordFilter,
    apply_filter,
    area_hotspots,
    area_options,
    fault_type_counts,
    material_usage,
    maintenance_trend,
    month_options,
    summary_stats,
    top_area_fault_breakdown,
    venue_counts,
    venue_options,
    work_type_options,
    work_type_trend,
    year_options,
)
from repair_core.constants import WORK_TYPES
from repair_core.io_excel import default_report_name, load_repair_excel, write_report
from repair_core.openai_helpers import maintenance_suggestions
from repair_core.record_processor import to_dataframe
from repair_core.store import RepairStore
from repair_core.vocabulary import KIND_FAULT, KIND_MATERIAL, prefill_from_uncategorized

WORK_TYPE_COLORS = {"水": "#0088FE", "電": "#FFBB28", "消防": "#FF8042", "營繕": "#00C49F", "其他": "#8884D8"}
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# --------------------------------
# Page config
# --------------------------------
st.set_page_config(page_title="維修紀錄分析系統", layout="wide")
st.title("🛠️ 維修紀錄分析系統")

# OPENAI_API_KEY / OPENAI_MODEL from secrets into env
if hasattr(st, "secrets"):
    for key in ("OPENAI_API_KEY", "OPENAI_MODEL"):
        try:
            if key in st.secrets and not os.environ.get(key):
                os.environ[key] = st.secrets[key]
        except FileNotFoundError:
            break

if "store" not in st.session_state:
    st.session_state.store = RepairStore()
store: RepairStore = st.session_state.store

# --------------------------------
# Sidebar: upload + filters
# --------------------------------
with st.sidebar:
    st.header("資料匯入")
    uploaded = st.file_uploader("上傳維修紀錄 Excel", type=["xlsx", "xls"])
    do_ingest = st.button("匯入", disabled=uploaded is None, type="primary")
    show_verbose = st.checkbox("顯示處理細節", value=False)

    st.markdown("---")
    do_recategorize = st.button("🔄 以目前清單重新分類", disabled=not store.records)

    st.markdown("---")
    st.header("篩選")
    records_all = store.records
    f_year = st.selectbox("年份", [""] + year_options(records_all), format_func=lambda v: v or "所有年份")
    f_month = st.selectbox("月份", [""] + month_options(records_all, f_year), format_func=lambda v: f"{v}月" if v else "所有月份")
    f_venue = st.selectbox("場域", [""] + venue_options(), format_func=lambda v: v or "所有場域")
    f_area = st.selectbox("區域", [""] + area_options(records_all, f_venue), format_func=lambda v: v or "所有區域")
    f_work_type = st.selectbox("工作類型", [""] + work_type_options(), format_func=lambda v: v or "所有類型")
    f_search = st.text_input("搜尋（故障描述、處理情形、材料、標籤）")

record_filter = RecordFilter(
    year=f_year, month=f_month, venue=f_venue, area=f_area,
    work_type=f_work_type, search=f_search.strip(),
)

if do_ingest and uploaded is not None:
    try:
        rows = load_repair_excel(uploaded)
    except Exception as e:
        st.error(f"讀取 Excel 失敗：{e}")
    else:
        summary = store.ingest(rows, verbose=show_verbose)
        if summary.valid:
            st.success(summary.message())
        else:
            st.warning(summary.message())

if do_recategorize:
    n = store.recategorize(verbose=show_verbose)
    st.success(f"已使用目前的故障原因與材料清單重新分類 {n} 筆紀錄。")

dashboard_records = apply_filter(store.records, record_filter, include_search=False)
list_records = apply_filter(store.records, record_filter, include_search=True)

tab_dash, tab_records, tab_settings = st.tabs(["📊 儀表板", "📋 維修紀錄", "⚙️ 管理設定"])

# ================================
# Dashboard
# ================================
with tab_dash:
    if not dashboard_records:
        st.info("尚無符合條件的有效紀錄。請先上傳資料或調整篩選。")
    else:
        stats = summary_stats(dashboard_records)
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("維修案件數", stats["total"])
        if stats["top_area"]:
            c2.metric("異常高發區域", stats["top_area"][0], f"{stats['top_area'][1]} 次", delta_color="off")
        if stats["top_fault"]:
            c3.metric("最常見故障", stats["top_fault"][0], f"{stats['top_fault'][1]} 次", delta_color="off")
        if stats["top_material"]:
            c4.metric("最常用材料", stats["top_material"][0], f"{stats['top_material'][1]} 件", delta_color="off")

        col_a, col_b = st.columns(2)
        with col_a:
            df_venue = venue_counts(dashboard_records)
            st.plotly_chart(px.pie(df_venue, names=COL_NAME, values=COL_COUNT, title="場域分佈"), use_container_width=True)
        with col_b:
            df_trend = maintenance_trend(dashboard_records, f_year, f_month)
            st.plotly_chart(
                px.line(df_trend, x=COL_NAME, y=COL_COUNT, markers=True, title="維修趨勢",
                        labels={COL_NAME: "期間", COL_COUNT: "維修數量"}),
                use_container_width=True,
            )

        df_hot = area_hotspots(dashboard_records).head(15)
        st.plotly_chart(
            px.bar(df_hot.iloc[::-1], x=COL_COUNT, y=COL_NAME, orientation="h", title="故障高發區域 (前 15)",
                   labels={COL_NAME: "區域", COL_COUNT: "次數"}),
            use_container_width=True,
        )

        st.subheader("熱點區域故障類型")
        top_areas = top_area_fault_breakdown(dashboard_records)
        for col, area in zip(st.columns(max(len(top_areas), 1)), top_areas):
            with col:
                st.caption(f"{area['area']}（總計 {area['total']} 次）")
                if area["faults"].empty:
                    st.write("無詳細故障分類")
                else:
                    st.plotly_chart(
                        px.bar(area["faults"].iloc[::-1], x=COL_COUNT, y=COL_NAME, orientation="h",
                               labels={COL_NAME: "", COL_COUNT: "次數"}),
                        use_container_width=True,
                    )

        col_c, col_d = st.columns(2)
        with col_c:
            df_faults = fault_type_counts(dashboard_records)
            st.plotly_chart(px.bar(df_faults, x=COL_NAME, y=COL_COUNT, title="故障類型統計",
                                   labels={COL_NAME: "故障類型", COL_COUNT: "次數"}),
                            use_container_width=True)
        with col_d:
            df_mat = material_usage(dashboard_records).head(20)
            st.plotly_chart(px.bar(df_mat, x=COL_NAME, y=COL_QUANTITY, title="材料使用統計 (前 20)",
                                   labels={COL_NAME: "材料", COL_QUANTITY: "數量"}),
                            use_container_width=True)

        df_wt = work_type_trend(store.records)
        if not df_wt.empty:
            df_long = df_wt.melt(id_vars=COL_NAME, value_vars=list(WORK_TYPES), var_name="工作類型", value_name=COL_COUNT)
            st.plotly_chart(
                px.line(df_long, x=COL_NAME, y=COL_COUNT, color="工作類型", markers=True,
                        title="各工作類型每月維修趨勢 (全部資料)", color_discrete_map=WORK_TYPE_COLORS,
                        labels={COL_NAME: "月份", COL_COUNT: "維修數量"}),
                use_container_width=True,
            )

    st.markdown("---")
    if st.button("💡 產生預防性維護建議"):
        with st.spinner("分析中..."):
            try:
                st.markdown(maintenance_suggestions(dashboard_records, record_filter))
            except RuntimeError as e:
                st.error(str(e))

# ================================
# Records
# ================================
with tab_records:
    st.caption(f"共 {len(list_records)} 筆（全部 {len(store.records)} 筆，其中有效 {len(store.valid_records())} 筆）")
    if list_records:
        df_view = to_dataframe(list_records)
        st.dataframe(df_view.drop(columns=["id", "is_valid", "validation_errors"]), use_container_width=True)

        col_e1, col_e2 = st.columns(2)
        with col_e1:
            buf = io.BytesIO()
            write_report(list_records, buf)
            st.download_button("📥 匯出 Excel 報告", data=buf.getvalue(),
                               file_name=default_report_name(), mime=XLSX_MIME, type="primary")
        with col_e2:
            labels = {r.id: f"#{r.original_index} {r.request_date} {r.fault_description[:30]}" for r in list_records}
            doomed = st.selectbox("刪除單筆紀錄", [""] + list(labels), format_func=lambda v: labels.get(v, "選擇紀錄"))
            if doomed and st.button("刪除此紀錄"):
                if store.delete_record(doomed):
                    st.success("紀錄已成功從列表中移除。")
                    st.rerun()

        if record_filter.is_active():
            with st.expander("🗑️ 刪除目前篩選結果"):
                confirm = st.checkbox(f"確定要刪除目前篩選出的 {len(list_records)} 筆紀錄嗎？此動作無法復原。")
                if st.button("刪除篩選結果", disabled=not confirm):
                    n = store.delete_filtered(record_filter)
                    st.success(f"已刪除 {n} 筆紀錄。")
                    st.rerun()
        else:
            with st.expander("🗑️ 刪除所有紀錄"):
                confirm = st.checkbox(
                    f"警告：目前未設定任何篩選，將刪除所有 {len(store.records)} 筆紀錄（含無效紀錄）。"
                    "確定要刪除所有紀錄嗎？此動作無法復原。"
                )
                if st.button("刪除所有紀錄", disabled=not confirm):
                    n = len(store.records)
                    store.clear()
                    st.success(f"已刪除所有 {n} 筆紀錄。")
                    st.rerun()
    else:
        st.info("沒有資料可顯示。")

    invalid = [r for r in store.records if not r.is_valid]
    if invalid:
        with st.expander(f"⚠️ 無效紀錄 ({len(invalid)})"):
            st.dataframe(to_dataframe(invalid)[["original_index", "work_attribute", "request_date", "validation_errors"]],
                         use_container_width=True)

# ================================
# Settings: vocabularies + uncategorized buckets
# ================================
def _vocabulary_panel(kind: str, title: str, bucket: list):
    vocab = store.vocabulary(kind)
    st.subheader(title)

    prefill_key, add_key = f"prefill_{kind}", f"add_{kind}"
    if prefill_key in st.session_state:
        st.session_state[add_key] = st.session_state.pop(prefill_key)
    text = st.text_input("新增", key=add_key)
    if st.button("新增", key=f"btn_add_{kind}"):
        added, msg = store.add_term(kind, text)
        (st.success if added else st.warning)(msg)

    for entry in vocab.entries:
        c_text, c_del = st.columns([5, 1])
        c_text.write(vocab.text_of(entry))
        if c_del.button("刪除", key=f"del_{kind}_{entry.id}"):
            store.remove_term(kind, entry.id)
            st.rerun()

    c_imp, c_exp = st.columns(2)
    with c_imp:
        up = st.file_uploader("匯入 JSON", type=["json"], key=f"import_{kind}")
        if up is not None and st.button("匯入清單", key=f"btn_import_{kind}"):
            try:
                added, skipped = store.import_terms(kind, up.read())
                st.success(f"匯入完成：新增 {added} 筆，略過 {skipped} 筆重複或空白項目。")
            except ValueError:
                st.error("檔案格式不符，應為 JSON 陣列。")
    with c_exp:
        st.download_button("匯出 JSON", data=vocab.to_json().encode("utf-8"),
                           file_name=f"{kind}_list.json", mime="application/json", key=f"export_{kind}")

    with st.expander(f"未分類項目 ({len(bucket)})"):
        for i, item in enumerate(bucket):
            c_item, c_add = st.columns([5, 1])
            c_item.write(item)
            if c_add.button("加入", key=f"pre_{kind}_{i}"):
                st.session_state[prefill_key] = prefill_from_uncategorized(item, kind)
                st.rerun()


with tab_settings:
    st.info("新增故障原因或材料名稱不會自動更新既有紀錄，請按側欄「以目前清單重新分類」。")
    col_f, col_m = st.columns(2)
    with col_f:
        _vocabulary_panel(KIND_FAULT, "故障原因清單", store.uncategorized_faults)
    with col_m:
        _vocabulary_panel(KIND_MATERIAL, "材料名稱清單", store.uncategorized_materials)
