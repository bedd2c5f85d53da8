# -*- coding: utf-8 -*-
from __future__ import annotations

from html import escape

# NOTE:
# - Keep HTML/JS as a normal triple-quoted string.
# - Do NOT use Python f-strings here: the template contains many `{}` (CSS/JS/template literals).

_ADMIN_TEMPLATE = r"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width,initial-scale=1" />
  <meta name="app-root" content="__TEXADMIN_APP_ROOT__" />
  <title>TexAdmin (development)</title>
  <style>
    :root {
      --bg: #0f172a;
      --panel: #111827;
      --text: #e5e7eb;
      --muted: #9ca3af;
      --border: rgba(255,255,255,0.08);
      --ok: #22c55e;
      --warn: #f59e0b;
      --err: #ef4444;
    }
    body {
      margin: 0;
      font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial;
      background: linear-gradient(180deg, #0b1220 0%, #0f172a 70%);
      color: var(--text);
    }
    .topbar {
      display:flex; align-items:center; gap: 10px;
      padding: 10px 14px;
      border-bottom: 1px solid var(--border);
      background: rgba(0,0,0,0.20);
      position: sticky; top: 0; z-index: 5;
    }
    .brand { font-weight: 700; }
    .meta { margin-left:auto; font-size: 12px; color: var(--muted); }
    .btn {
      padding: 6px 10px; border: 1px solid var(--border); border-radius: 999px;
      background: rgba(255,255,255,0.03); color: var(--text); font-size: 13px; cursor: pointer;
    }
    .btn.active { border-color: rgba(255,255,255,0.3); background: rgba(255,255,255,0.08); }
    input[type="text"], select {
      padding: 6px 10px; border-radius: 10px; border: 1px solid var(--border);
      background: rgba(0,0,0,0.18); color: var(--text); font-size: 13px; outline: none;
    }
    .grid {
      display: grid; gap: 10px; padding: 14px;
      grid-template-columns: repeat(5, minmax(0, 1fr));
    }
    @media (min-width: 640px) { .grid { grid-template-columns: repeat(8, minmax(0, 1fr)); } }
    @media (min-width: 900px) { .grid { grid-template-columns: repeat(10, minmax(0, 1fr)); } }
    @media (min-width: 1400px) { .grid { grid-template-columns: repeat(12, minmax(0, 1fr)); } }
    .card {
      border: 1px solid var(--border); border-radius: 10px; padding: 6px;
      background: rgba(17,24,39,0.75); cursor: pointer; font-size: 11px;
    }
    .card:hover { border-color: rgba(255,255,255,0.25); }
    .card img { width: 100%; aspect-ratio: 1; object-fit: contain; image-rendering: pixelated; }
    .trunc { white-space: nowrap; overflow: hidden; text-overflow: ellipsis; }
    .muted { color: var(--muted); }
    .mono { font-family: ui-monospace, SFMono-Regular, Menlo, Consolas, monospace; }
    .pager { display:flex; gap: 6px; justify-content:center; padding: 10px; }
    .modal-bg { position: fixed; inset: 0; background: rgba(0,0,0,0.55); display:none; align-items:center; justify-content:center; z-index: 10; }
    .modal { width: 380px; background: var(--panel); border: 1px solid var(--border); border-radius: 12px; padding: 16px; }
    .modal .row { display:flex; gap: 8px; align-items:center; margin: 8px 0; }
    .toast { position: fixed; right: 16px; bottom: 16px; padding: 8px 12px; border-radius: 10px; display:none; z-index: 20; }
    .toast.success { background: var(--ok); color: #000; }
    .toast.warning { background: var(--warn); color: #000; }
    .toast.error { background: var(--err); }
  </style>
</head>
<body>
  <div class="topbar">
    <span class="brand">TexAdmin</span>
    <input id="q" type="text" placeholder="Search name / id / code" />
    <select id="cat"></select>
    <button class="btn" id="clearCache">Clear cache</button>
    <button class="btn" id="retryEdit" style="display:none">Retry last edit</button>
    <span class="meta" id="meta"></span>
  </div>
  <div class="grid" id="grid"></div>
  <div class="pager" id="pager"></div>

  <div class="modal-bg" id="modalBg">
    <div class="modal">
      <h3>Edit texture</h3>
      <div class="mono muted" id="mId"></div>
      <div class="row"><label>Name</label><input id="mName" type="text" /></div>
      <div class="row"><input type="radio" name="catMode" id="mExisting" checked /><label for="mExisting">Existing category</label></div>
      <div class="row"><select id="mCat"></select></div>
      <div class="row"><input type="radio" name="catMode" id="mNew" /><label for="mNew">New category</label></div>
      <div class="row"><input id="mNewCat" type="text" placeholder="New category" /></div>
      <div class="row"><button class="btn" id="mSave">Save</button><button class="btn" id="mCancel">Cancel</button></div>
    </div>
  </div>
  <div class="toast" id="toast"></div>

  <script>
    const APP_ROOT = document.querySelector('meta[name="app-root"]').content || '';
    const state = { q: '', category: 'all', page: 1, view: null, editing: null };

    function escHtml(s) {
      return String(s == null ? '' : s)
        .replaceAll('&', '&amp;').replaceAll('<', '&lt;').replaceAll('>', '&gt;')
        .replaceAll('"', '&quot;').replaceAll("'", '&#39;');
    }

    async function fetchJson(url, opts) {
      const r = await fetch(APP_ROOT + url, opts || {});
      const data = await r.json().catch(() => ({}));
      return { ok: r.ok, status: r.status, data };
    }

    function toast(type, message) {
      const el = document.getElementById('toast');
      el.className = 'toast ' + type;
      el.textContent = message;
      el.style.display = 'block';
      setTimeout(() => { el.style.display = 'none'; }, 2500);
    }

    async function drainNotices() {
      const r = await fetchJson('/api/admin/notices');
      for (const n of (r.data.notices || [])) toast(n.type, n.message);
    }

    function renderMeta(v) {
      const c = v.cache || {};
      let s = `${v.filtered} / ${v.total} textures · ${c.label || 'no cache'}`;
      if (c.updatedAt) s += ` · updated ${c.updatedAt}`;
      document.getElementById('meta').textContent = s;
    }

    function renderCategories(v) {
      const sel = document.getElementById('cat');
      const opts = ['<option value="all">All</option>'].concat(
        (v.categories || []).map(c => `<option value="${escHtml(c)}">${escHtml(c)}</option>`));
      sel.innerHTML = opts.join('');
      sel.value = state.category;
      document.getElementById('mCat').innerHTML = ['<option value="">Choose a category</option>'].concat(
        (v.categories || []).map(c => `<option value="${escHtml(c)}">${escHtml(c)}</option>`)).join('');
    }

    function renderGrid(v) {
      document.getElementById('grid').innerHTML = v.items.map((it, i) => `
        <div class="card" data-i="${i}">
          <img src="${escHtml(APP_ROOT + it.imagePath)}" alt="${escHtml(it.name)}" loading="lazy" />
          <div class="trunc" title="${escHtml(it.name)}">${escHtml(it.name)}</div>
          <div class="trunc mono muted">${escHtml(it.txCode)}</div>
          <div class="trunc muted" title="${escHtml(it.category)}">${escHtml(it.category)}</div>
        </div>`).join('');
      document.querySelectorAll('.card').forEach(el => {
        el.onclick = () => openModal(v.items[Number(el.dataset.i)]);
      });
    }

    function renderPager(v) {
      const el = document.getElementById('pager');
      if (v.totalPages <= 1) { el.innerHTML = ''; return; }
      const btns = [];
      btns.push(`<button class="btn" data-p="${v.page - 1}" ${v.page <= 1 ? 'disabled' : ''}>&lt;</button>`);
      for (const p of v.window) {
        btns.push(`<button class="btn ${p === v.page ? 'active' : ''}" data-p="${p}">${p}</button>`);
      }
      btns.push(`<button class="btn" data-p="${v.page + 1}" ${v.page >= v.totalPages ? 'disabled' : ''}>&gt;</button>`);
      el.innerHTML = btns.join('');
      el.querySelectorAll('button').forEach(b => { b.onclick = () => load(Number(b.dataset.p)); });
    }

    async function load(page) {
      state.page = page || 1;
      const qs = new URLSearchParams({ q: state.q, category: state.category, page: String(state.page) });
      const r = await fetchJson('/api/admin/view?' + qs.toString());
      if (!r.ok) { toast('error', 'Load failed'); return; }
      state.view = r.data;
      state.page = r.data.page;
      renderMeta(r.data);
      renderCategories(r.data);
      renderGrid(r.data);
      renderPager(r.data);
    }

    function openModal(it, draft) {
      const d = draft || { name: it.name, category: it.category, newCategory: '', useNewCategory: false };
      const cats = (state.view && state.view.categories) || [];
      state.editing = it;
      document.getElementById('mId').textContent = `${it.id} · ${it.txCode}`;
      document.getElementById('mName').value = d.name;
      // a category outside the list (e.g. the default) leaves the choice empty
      document.getElementById('mCat').value = cats.includes(d.category) ? d.category : '';
      document.getElementById(d.useNewCategory ? 'mNew' : 'mExisting').checked = true;
      document.getElementById('mNewCat').value = d.newCategory || '';
      document.getElementById('modalBg').style.display = 'flex';
    }

    function closeModal() {
      state.editing = null;
      document.getElementById('modalBg').style.display = 'none';
    }

    async function saveModal() {
      const it = state.editing;
      if (!it) return;
      const useNew = document.getElementById('mNew').checked;
      const name = document.getElementById('mName').value.trim();
      const category = (useNew ? document.getElementById('mNewCat').value : document.getElementById('mCat').value).trim();
      if (!name || !category) { toast('warning', 'Please fill in both name and category'); return; }
      closeModal();
      const r = await fetchJson('/api/admin/textures/' + encodeURIComponent(it.id), {
        method: 'POST',
        headers: { 'Content-Type': 'application/json' },
        body: JSON.stringify({ name, category, new_category: useNew }),
      });
      document.getElementById('retryEdit').style.display = r.status >= 500 ? 'inline-block' : 'none';
      await drainNotices();
      await load(state.page);
    }

    async function retryEdit() {
      const r = await fetchJson('/api/admin/edit/retry', { method: 'POST' });
      document.getElementById('retryEdit').style.display = 'none';
      if (!r.ok || !r.data.item) { toast('warning', 'Nothing to retry'); return; }
      openModal(r.data.item, r.data.draft);
    }

    let searchTimer = null;
    document.getElementById('q').oninput = (e) => {
      clearTimeout(searchTimer);
      searchTimer = setTimeout(() => { state.q = e.target.value; load(1); }, 200);
    };
    document.getElementById('cat').onchange = (e) => { state.category = e.target.value; load(1); };
    document.getElementById('clearCache').onclick = async () => {
      await fetchJson('/api/admin/cache/clear', { method: 'POST' });
      await drainNotices();
      await load(1);
    };
    document.getElementById('retryEdit').onclick = retryEdit;
    document.getElementById('mSave').onclick = saveModal;
    document.getElementById('mCancel').onclick = closeModal;

    load(1);
  </script>
</body>
</html>
"""

_RESTRICTED_TEMPLATE = r"""<!doctype html>
<html lang="en">
<head><meta charset="utf-8" /><title>Access restricted</title></head>
<body style="font-family: ui-sans-serif, system-ui; display:flex; align-items:center; justify-content:center; min-height:100vh; background:#f3f4f6;">
  <div style="text-align:center">
    <h1>Access restricted</h1>
    <p>This page is only available in development mode.</p>
  </div>
</body>
</html>
"""


def render_admin_html(app_root: str = "") -> str:
    """Render the admin page.

    app_root:
      - ""       normal direct serving
      - "/xxx"   reverse proxy mount path
    """
    return _ADMIN_TEMPLATE.replace("__TEXADMIN_APP_ROOT__", escape(app_root or ""))


def render_restricted_html() -> str:
    return _RESTRICTED_TEMPLATE
