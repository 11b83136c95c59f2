"""
gen-eval-core Result Viewer

Minimal Streamlit dashboard for viewing saved evaluation results.
Displays per-metric scores, record-level failures and batch comparisons.

Usage:
    pip install -e ".[viewer]"
    streamlit run src/gen_eval_core/viewer.py
    streamlit run src/gen_eval_core/viewer.py -- --results-dir results

Requires the package to be installed (e.g. via ``pip install -e .``).
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

# -- Colors --
MODEL_COLORS = [
    "#1a73e8", "#e8710a", "#34a853", "#ea4335", "#9334e6",
    "#f538a0", "#00897b", "#6d4c41", "#546e7a", "#d500f9",
]

RUN_HINT = "Run an evaluation first:\n```\npython -m gen_eval_core.runner --task tasks/summarization_task.json\n```"


def _short_model_name(name: str) -> str:
    """Shorten model name for display."""
    parts = name.split("/")
    return parts[-1] if len(parts) > 1 else name


def _find_result_files(results_dir: Path) -> list[dict]:
    """Find single (result_*.json) and batch (batch_*.json) result files, newest first."""
    files = []
    for path in sorted(results_dir.glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True):
        if path.name.startswith("result_"):
            files.append({"label": path.stem.removeprefix("result_"), "kind": "single", "path": path})
        elif path.name.startswith("batch_"):
            files.append({"label": path.stem.removeprefix("batch_"), "kind": "batch", "path": path})
    return files


def _load_json(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _metric_frame(result: dict) -> pd.DataFrame:
    """Metric rows of one saved evaluation result."""
    rows = []
    for mr in result.get("metric_results", []):
        records = mr.get("record_results", [])
        failed = sum(1 for rr in records if rr.get("error"))
        rows.append({
            "Metric": mr["metric_name"],
            "Type": mr["metric_type"],
            "Score": mr["score"],
            "Records": f"{len(records) - failed}/{len(records)}",
            "Error": mr.get("error", ""),
        })
    return pd.DataFrame(rows)


def _render_single(result: dict) -> None:
    """Render one evaluation result."""
    st.header(result.get("task_name") or "Evaluation")

    col1, col2, col3 = st.columns(3)
    col1.metric("Overall score", f"{result.get('overall_score', 0.0):.3f}")
    dataset_info = result.get("dataset_info") or {}
    col2.metric("Records", dataset_info.get("record_count", 0))
    col3.metric("Duration", f"{result.get('duration', 0.0):.1f}s")

    metric_df = _metric_frame(result)
    if metric_df.empty:
        st.info("No metric results.")
        return

    succeeded = metric_df[metric_df["Error"] == ""]
    fig = go.Figure(go.Bar(
        x=succeeded["Metric"],
        y=succeeded["Score"],
        marker_color=MODEL_COLORS[0],
        text=[f"{s:.3f}" for s in succeeded["Score"]],
        textposition="outside",
    ))
    fig.update_layout(
        title="Metric Scores",
        xaxis_title="Metric",
        yaxis_title="Score",
        template="plotly_white",
        height=420,
    )
    st.plotly_chart(fig, use_container_width=True)

    st.subheader("Metrics")
    st.dataframe(metric_df, use_container_width=True, hide_index=True)

    failed = metric_df[metric_df["Error"] != ""]
    for _, row in failed.iterrows():
        st.error(f"**{row['Metric']}** failed: {row['Error']}")

    record_rows = [
        {"Metric": mr["metric_name"], "Record": rr["index"], "Error": rr["error"]}
        for mr in result.get("metric_results", [])
        for rr in mr.get("record_results", [])
        if rr.get("error")
    ]
    if record_rows:
        st.subheader("Record Failures")
        st.dataframe(pd.DataFrame(record_rows), use_container_width=True, hide_index=True)


def _render_batch(batch: dict) -> None:
    """Render a batch evaluation with its cross-model comparison."""
    results = batch.get("results", [])
    st.header(f"Batch Evaluation ({len(results)} models)")

    rows = []
    for result in results:
        model = (result.get("model_config") or {}).get("model_name") or result.get("experiment_run", "")
        for mr in result.get("metric_results", []):
            if not mr.get("error"):
                rows.append({"model": _short_model_name(model), "metric": mr["metric_name"], "score": mr["score"]})
    score_df = pd.DataFrame(rows, columns=["model", "metric", "score"])

    if not score_df.empty:
        fig = go.Figure()
        for i, (model, group) in enumerate(score_df.groupby("model", sort=False)):
            fig.add_trace(go.Bar(
                x=group["metric"],
                y=group["score"],
                name=model,
                marker_color=MODEL_COLORS[i % len(MODEL_COLORS)],
            ))
        fig.update_layout(
            title="Scores by Metric",
            barmode="group",
            xaxis_title="Metric",
            yaxis_title="Score",
            legend_title="Model",
            template="plotly_white",
            height=450,
        )
        st.plotly_chart(fig, use_container_width=True)

    comparison = batch.get("comparison")
    if not comparison:
        st.warning("No comparison available (fewer than 2 successful evaluations).")
        return

    st.success(f"Best model: **{_short_model_name(comparison['best_model'])}**")

    st.subheader("Metric Comparison")
    comp_rows = []
    for name, comp in sorted(comparison.get("metric_comparisons", {}).items()):
        leaders = [_short_model_name(r["model_name"]) for r in comp.get("rankings", []) if r.get("rank") == 1]
        comp_rows.append({
            "Metric": name,
            "Best": comp["best_score"],
            "Worst": comp["worst_score"],
            "Range": comp["score_range"],
            "Leader": ", ".join(leaders),
        })
    st.dataframe(pd.DataFrame(comp_rows), use_container_width=True, hide_index=True)

    st.subheader("Overall Scores")
    overall = pd.DataFrame([
        {
            "Model": _short_model_name((r.get("model_config") or {}).get("model_name", "")),
            "Overall score": r.get("overall_score", 0.0),
        }
        for r in results
    ]).sort_values("Overall score", ascending=False)
    st.dataframe(overall, use_container_width=True, hide_index=True)


def main() -> None:
    # Parse --results-dir from Streamlit args (after --)
    parser = argparse.ArgumentParser()
    parser.add_argument("--results-dir", default="results")
    args, _ = parser.parse_known_args()

    results_dir = Path(args.results_dir)

    st.set_page_config(page_title="gen-eval-core", layout="wide")
    st.title("gen-eval-core Results")

    if not results_dir.exists():
        st.error(f"Results directory not found: `{results_dir}`")
        st.info(RUN_HINT)
        return

    files = _find_result_files(results_dir)
    if not files:
        st.warning(f"No result files found in `{results_dir}/`")
        st.info(RUN_HINT)
        return

    # Run selector
    labels = [f"{f['label']} ({f['kind']})" for f in files]
    selected = st.sidebar.selectbox("Run", labels, index=0)
    selected_file = files[labels.index(selected)]
    data = _load_json(selected_file["path"])

    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**File**: `{selected_file['path'].name}`")

    if selected_file["kind"] == "batch":
        st.sidebar.markdown(f"**Models**: {len(data.get('results', []))}")
        _render_batch(data)
    else:
        st.sidebar.markdown(f"**Experiment**: {data.get('experiment') or '-'}")
        _render_single(data)


if __name__ == "__main__":
    main()
