"""HTML template assets for report rendering."""

from __future__ import annotations


def render_html_document(
    *,
    title: str,
    subtitle: str,
    dashboard_cards: str,
    members_table: str,
    scenario_table: str,
    projection_table: str,
    warnings_table: str,
    payload_json: str,
) -> str:
    return f"""<!doctype html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
  <title>{title}</title>
  <style>
    :root {{
      --bg: #eef4f1;
      --panel: #fcfffd;
      --ink: #1f2937;
      --muted: #6b7280;
      --line: #b9d3c6;
      --brand: #0f766e;
      --accent: #b45309;
      --warn: #991b1b;
    }}
    * {{ box-sizing: border-box; }}
    body {{ margin: 0; font-family: 'Trebuchet MS', 'Segoe UI', sans-serif; color: var(--ink); background: radial-gradient(circle at top right, #c7ecdd 0, var(--bg) 45%); }}
    .wrap {{ max-width: 1180px; margin: 0 auto; padding: 1rem; }}
    h1 {{ margin: 0.1rem 0 0.25rem; font-size: 1.9rem; }}
    h2 {{ font-size: 1.15rem; margin: 0 0 0.5rem; }}
    .meta {{ color: var(--muted); font-size: 0.95rem; margin-bottom: 0.8rem; }}
    .tabs {{ display: flex; flex-wrap: wrap; gap: 0.5rem; margin: 0.75rem 0; }}
    .tab-btn {{ border: 1px solid var(--line); background: #fff; padding: 0.45rem 0.75rem; cursor: pointer; border-radius: 999px; font-weight: 700; }}
    .tab-btn.active {{ background: var(--brand); color: #fff; border-color: var(--brand); }}
    .tab {{ display: none; }}
    .tab.active {{ display: block; }}
    .panel {{ background: var(--panel); border: 1px solid var(--line); border-radius: 14px; padding: 0.85rem; margin-bottom: 0.85rem; }}
    .cards {{ display: grid; gap: 0.6rem; grid-template-columns: repeat(auto-fit, minmax(180px, 1fr)); }}
    .card {{ background: #fff; border: 1px solid var(--line); border-radius: 12px; padding: 0.65rem; }}
    .card .k {{ color: var(--muted); font-size: 0.85rem; }}
    .card .v {{ font-size: 1.2rem; font-weight: 700; }}
    canvas {{ width: 100%; height: 280px; display: block; background: #fff; border: 1px solid #d5e6dd; border-radius: 10px; }}
    table {{ border-collapse: collapse; width: 100%; font-size: 0.9rem; }}
    th, td {{ border: 1px solid #d5e6dd; padding: 0.35rem 0.45rem; text-align: right; }}
    th:first-child, td:first-child {{ text-align: left; }}
    .warning {{ background: #fff1e6; color: var(--warn); }}
    .subtle {{ color: var(--muted); font-size: 0.85rem; }}
    .table-wrap {{ max-height: 520px; overflow: auto; }}
    @media (max-width: 700px) {{
      h1 {{ font-size: 1.5rem; }}
      canvas {{ height: 220px; }}
    }}
  </style>
</head>
<body>
  <div class=\"wrap\">
    <h1>{title}</h1>
    <div class=\"meta\">{subtitle}</div>
    <div class=\"tabs\" id=\"tabs\">
      <button class=\"tab-btn active\" data-tab=\"plan\">Plan</button>
      <button class=\"tab-btn\" data-tab=\"projection\">Projection</button>
      <button class=\"tab-btn\" data-tab=\"validation\">Plan Validation</button>
    </div>

    <section class=\"tab active\" id=\"tab-plan\">
      <div class=\"cards\">{dashboard_cards}</div>
      <div class=\"panel\"><h2>Members</h2>{members_table}</div>
      <div class=\"panel\"><h2>Scenario</h2>{scenario_table}</div>
    </section>

    <section class=\"tab\" id=\"tab-projection\">
      <div class=\"panel\"><canvas id=\"chart-projection\"></canvas></div>
      <div class=\"panel\">{projection_table}</div>
    </section>

    <section class=\"tab\" id=\"tab-validation\">
      <div class=\"panel\">{warnings_table}</div>
    </section>
  </div>

  <script>
    const payload = {payload_json};

    function tabsInit() {{
      const buttons = [...document.querySelectorAll('.tab-btn')];
      buttons.forEach((btn) => {{
        btn.addEventListener('click', () => {{
          buttons.forEach((b) => b.classList.remove('active'));
          btn.classList.add('active');
          [...document.querySelectorAll('.tab')].forEach((tab) => tab.classList.remove('active'));
          document.getElementById(`tab-${{btn.dataset.tab}}`).classList.add('active');
          renderAll();
        }});
      }});
    }}

    function drawAxes(ctx, w, h) {{
      ctx.strokeStyle = '#ddd';
      ctx.lineWidth = 1;
      ctx.beginPath();
      ctx.moveTo(40, 10); ctx.lineTo(40, h - 24); ctx.lineTo(w - 8, h - 24); ctx.stroke();
    }}

    function drawLines(canvasId, seriesList, title) {{
      const c = document.getElementById(canvasId); if (!c) return;
      const rect = c.getBoundingClientRect(); c.width = Math.max(380, Math.floor(rect.width)); c.height = Math.floor(rect.height) || 280;
      const ctx = c.getContext('2d'); const w = c.width, h = c.height;
      ctx.clearRect(0, 0, w, h); drawAxes(ctx, w, h);
      const all = seriesList.flatMap((s) => s.values.map(Number));
      const maxV = Math.max(1, payload.charts.target, ...all);
      seriesList.forEach((s, idx) => {{
        const vals = s.values.map(Number);
        ctx.strokeStyle = s.color; ctx.lineWidth = 2; ctx.beginPath();
        vals.forEach((v, i) => {{
          const x = 40 + (i * (w - 56) / Math.max(1, vals.length - 1));
          const y = (h - 24) - (v / maxV) * (h - 38);
          if (i === 0) ctx.moveTo(x, y); else ctx.lineTo(x, y);
        }});
        ctx.stroke();
        ctx.fillStyle = s.color; ctx.font = '12px sans-serif'; ctx.fillText(s.label, 50 + idx * 150, 24);
      }});
      ctx.fillStyle = '#111'; ctx.font = 'bold 12px sans-serif'; ctx.fillText(title, 10, 12);
    }}

    function renderAll() {{
      const base = payload.charts.base;
      const series = [
        {{ label: 'Projected balance', values: base.total, color: '#0f766e' }},
        {{ label: 'Contributions', values: base.contributions, color: '#b45309' }},
      ];
      if (payload.charts.scenario) {{
        series.push({{ label: 'Scenario balance', values: payload.charts.scenario.total, color: '#6b21a8' }});
      }}
      drawLines('chart-projection', series, 'Goal Projection');
    }}

    tabsInit();
    renderAll();
    addEventListener('resize', () => renderAll());
  </script>
</body>
</html>
"""
