from __future__ import annotations

import html
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from .auth import optional_user
from .models import User

router = APIRouter(tags=["dashboard"])

PAGE = """
<!doctype html>
<html lang="ja" data-theme="dark">
<meta name="viewport" content="width=device-width, initial-scale=1"/>
<title>Mirutasu</title>
<style>
:root{
  --bg:#0b0f14; --fg:#e6edf3; --muted:#9aa4af; --accent:#7aa2f7; --accent-hover:#5b8ef5;
  --card-bg: rgba(255,255,255,0.06); --border: rgba(255,255,255,0.12); --input-bg: rgba(255,255,255,0.06);
  --shadow: 0 10px 30px rgba(0,0,0,.35); --radius: 16px;
  --high:#f7768e; --medium:#e0af68; --low:#9ece6a;
}
html[data-theme="light"]{
  --bg:#eef2f7; --fg:#0b1220; --muted:#5c6773; --accent:#3b82f6; --accent-hover:#2563eb;
  --card-bg: rgba(255,255,255,0.6); --border: rgba(0,0,0,0.08); --input-bg: rgba(255,255,255,0.9);
  --shadow: 0 10px 30px rgba(16,24,40,.15);
}
*{box-sizing:border-box}
body{
  margin:0; min-height:100vh; color:var(--fg); font:16px/1.5 system-ui,-apple-system,Segoe UI,Roboto,Inter,Arial,sans-serif;
  background:
    radial-gradient(1200px 800px at 10% 10%, #1a2940 0%, transparent 55%),
    radial-gradient(1000px 700px at 90% 30%, #422046 0%, transparent 60%),
    var(--bg);
}
.container{ max-width: 1000px; margin: 0 auto; padding: 40px 20px; }
.header{
  display:flex; align-items:center; justify-content:space-between; gap:12px; margin-bottom:24px;
  background: var(--card-bg); border:1px solid var(--border); border-radius: calc(var(--radius) + 4px);
  padding: 14px 16px; box-shadow: var(--shadow); backdrop-filter: blur(14px) saturate(120%);
}
.header h1{ font-size:18px; margin:0; }
.grid{ display:grid; gap:20px; grid-template-columns: 1.2fr .8fr; }
@media (max-width: 900px){ .grid{ grid-template-columns: 1fr; } }
.card{
  background: var(--card-bg); border:1px solid var(--border); border-radius: var(--radius);
  padding: 18px; box-shadow: var(--shadow); backdrop-filter: blur(18px) saturate(140%);
}
.card h2{ margin:0 0 10px 0; font-size:18px; }
label{ display:block; margin:10px 0 6px; color:var(--muted); font-size:13px; }
input{ width:100%; padding:12px 14px; border-radius:12px; border:1px solid var(--border); background:var(--input-bg); color:var(--fg); }
button{
  appearance:none; border:1px solid transparent; cursor:pointer; color:white; font-weight:600;
  background: linear-gradient(180deg, var(--accent), var(--accent-hover)); padding:10px 14px; border-radius:12px;
}
button.secondary{ background:transparent; color:var(--fg); border-color:var(--border); }
.task{ display:flex; justify-content:space-between; align-items:center; gap:8px; padding:12px;
  border-radius:12px; border:1px dashed var(--border); }
.task + .task{ margin-top:10px; }
.task.done .title{ text-decoration: line-through; color: var(--muted); }
.badge{ font-size:12px; padding:2px 8px; border-radius:999px; border:1px solid var(--border); }
.badge.high{ color:var(--high); } .badge.medium{ color:var(--medium); } .badge.low{ color:var(--low); }
.stat{ display:flex; justify-content:space-between; padding:6px 0; border-bottom:1px solid var(--border); }
.muted{ color:var(--muted); font-size:13px; }
.switch{ width:42px; height:24px; border-radius:20px; border:1px solid var(--border); background:var(--input-bg); position:relative; cursor:pointer; }
.knob{ position:absolute; top:2px; left:2px; width:20px; height:20px; border-radius:50%; background:var(--fg); transition: all .2s ease; }
.switch.on .knob{ transform: translateX(18px); }
.hidden{ display:none; }
</style>
<body>
<div class="container">
  <div class="header">
    <div>
      <h1>ミルタス / Otaku Secretary</h1>
      <div class="muted" id="greeting">__GREETING__</div>
    </div>
    <div class="switch" id="themeSwitch" role="button" aria-label="Toggle theme"><div class="knob"></div></div>
  </div>

  <div class="card __LOGIN_CLASS__" id="loginCard">
    <h2>Log in</h2>
    <form id="loginForm">
      <label>Email</label><input name="email" type="email" required/>
      <label>Password</label><input name="password" type="password" required/>
      <div style="margin-top:14px"><button type="submit">Log in</button></div>
      <div class="muted" id="loginError"></div>
    </form>
  </div>

  <div class="grid __APP_CLASS__" id="appGrid">
    <div class="card">
      <h2>Today</h2>
      <div class="muted" id="summary"></div>
      <div id="tasks" style="margin-top:10px"></div>
    </div>
    <div class="card">
      <h2>Statistics</h2>
      <div id="stats"></div>
    </div>
  </div>
</div>

<script>
(function(){
  const root = document.documentElement;
  const saved = localStorage.getItem("mirutasu-theme");
  if(saved){ root.setAttribute("data-theme", saved); }
  const sw = document.getElementById("themeSwitch");
  const apply = () => sw.classList.toggle("on", root.getAttribute("data-theme")==="light");
  apply();
  sw.addEventListener("click", () => {
    const mode = root.getAttribute("data-theme")==="dark" ? "light" : "dark";
    root.setAttribute("data-theme", mode);
    localStorage.setItem("mirutasu-theme", mode);
    apply();
  });
})();

function escapeHtml(s){
  return (s ?? "").replace(/[&<>"']/g, c => ({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#039;'}[c]));
}

async function api(path, opts){
  const res = await fetch(path, Object.assign({credentials: "same-origin", headers: {"Content-Type": "application/json"}}, opts || {}));
  const body = await res.json().catch(() => ({}));
  if(!res.ok){ throw Object.assign(new Error(body.error || res.statusText), {status: res.status}); }
  return body;
}

async function loadToday(){
  const el = document.getElementById("tasks");
  const data = await api("/api/tasks/today");
  const s = data.summary;
  document.getElementById("summary").textContent = `${s.completed} / ${s.total} done (${s.completionRate}%)`;
  if(!data.tasks.length){ el.innerHTML = "<div class='muted'>Nothing for today.</div>"; return; }
  el.innerHTML = data.tasks.map(t => `
    <div class="task ${t.completed ? "done" : ""}">
      <div><span class="badge ${t.priority}">${t.priority}</span> <span class="title">${escapeHtml(t.title)}</span>
        <div class="muted">${escapeHtml(t.type)}</div></div>
      ${t.completed ? "" : `<button class="secondary" data-id="${t.id}">Done</button>`}
    </div>`).join("");
  el.querySelectorAll("button[data-id]").forEach(b => b.addEventListener("click", async () => {
    await api(`/api/tasks/${b.dataset.id}/complete`, {method: "POST"});
    refresh();
  }));
}

async function loadStats(){
  const d = (await api("/api/statistics")).data;
  const row = (label, s) => `<div class="stat"><span>${label}</span><span>${s.completed}/${s.total} (${s.completionRate}%)</span></div>`;
  document.getElementById("stats").innerHTML =
    row("Today", d.today) + row(`This week ${d.week.trend}`, d.week) +
    row("Anime", d.byType.anime) + row("Game dailies", d.byType.gameTasks) +
    row("Book releases", d.byType.bookReleases) +
    `<div class="stat"><span>Active games</span><span>${d.games.active}</span></div>`;
}

function showApp(on){
  document.getElementById("loginCard").classList.toggle("hidden", on);
  document.getElementById("appGrid").classList.toggle("hidden", !on);
}

async function refresh(){
  try{
    await Promise.all([loadToday(), loadStats()]);
    showApp(true);
  }catch(e){
    if(e.status === 401){ showApp(false); } else { console.error(e); }
  }
}

document.getElementById("loginForm").addEventListener("submit", async (ev) => {
  ev.preventDefault();
  const f = new FormData(ev.target);
  try{
    const r = await api("/api/auth/login", {method: "POST", body: JSON.stringify({email: f.get("email"), password: f.get("password")})});
    document.getElementById("greeting").textContent = `おかえり、${r.user.username}`;
    refresh();
  }catch(e){
    document.getElementById("loginError").textContent = e.message;
  }
});

refresh();
</script>
</body>
</html>
"""


def render_dashboard(user: Optional[User]) -> str:
    if user:
        greeting = f"おかえり、{html.escape(user.username)}"
        login_class, app_class = "hidden", ""
    else:
        greeting = "Anime, game dailies and recurring tasks in one place."
        login_class, app_class = "", "hidden"
    return (
        PAGE.replace("__GREETING__", greeting)
        .replace("__LOGIN_CLASS__", login_class)
        .replace("__APP_CLASS__", app_class)
    )


@router.get("/", response_class=HTMLResponse)
def home(user: Optional[User] = Depends(optional_user)):
    return render_dashboard(user)
