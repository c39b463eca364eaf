"""
Web UI route handlers: the scrape viewer and the stored places table.
"""
import html
import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from ..config import config
from ..database import get_places, get_places_count

logger = logging.getLogger(__name__)
router = APIRouter(tags=["ui"])

ROWS_PER_PAGE = 10

# HTML template for the main page
INDEX_HTML = '''<!doctype html>
<html lang="en" class="h-full">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>Google Maps Scraper</title>
  <script src="https://unpkg.com/htmx.org@1.9.12"></script>
  <script src="https://cdn.tailwindcss.com"></script>
</head>
<body class="h-full bg-slate-50 text-slate-900">
<div class="max-w-7xl mx-auto px-4 py-6">
  <h1 class="text-2xl font-semibold mb-4">Google Maps Scraper</h1>
  <div class="flex flex-wrap gap-3 mb-4">
    <input id="queryInput" class="border rounded px-3 py-2 flex-1" type="text" placeholder="coffee shop London"/>
    <input id="responseLimit" class="border rounded px-3 py-2 w-28" type="number" min="1" max="__MAX_LIMIT__" value="20"/>
    <button id="scrapeBtn" class="px-3 py-2 rounded bg-slate-800 text-white">Scrape</button>
  </div>
  <div id="loading" class="hidden mb-4 text-slate-500">Scraping, this can take a few minutes...</div>

  <div id="resultSection" class="hidden mb-8">
    <div class="bg-white rounded-xl shadow border overflow-x-auto">
      <table id="resultTable" class="min-w-full divide-y divide-slate-200">
        <thead class="bg-slate-50"><tr>
          <th class="px-3 py-2 text-left text-xs font-semibold">Name</th>
          <th class="px-3 py-2 text-left text-xs font-semibold">Address</th>
          <th class="px-3 py-2 text-left text-xs font-semibold">Phone</th>
          <th class="px-3 py-2 text-left text-xs font-semibold">Website</th>
          <th class="px-3 py-2 text-left text-xs font-semibold">Rating</th>
          <th class="px-3 py-2 text-left text-xs font-semibold">Reviews</th>
          <th class="px-3 py-2 text-left text-xs font-semibold">Maps</th>
        </tr></thead>
        <tbody class="divide-y divide-slate-100"></tbody>
      </table>
    </div>
    <div class="flex items-center gap-2 mt-3">
      <button id="prevPage" class="px-3 py-1 rounded border">Prev</button>
      <span id="pageInfo" class="text-sm text-slate-600"></span>
      <button id="nextPage" class="px-3 py-1 rounded border">Next</button>
      <button id="exportCSV" class="ml-auto px-3 py-1 rounded border">Export CSV</button>
    </div>
  </div>

  <h2 class="text-lg font-semibold mb-2">Stored places</h2>
  <a class="inline-block mb-2 px-3 py-1 rounded border" href="/api/export/csv" target="_blank">Export all (CSV)</a>
  <div id="stored" hx-get="/ui/table" hx-trigger="load, refresh"></div>
</div>
<script>
const ROWS_PER_PAGE = 10;
const COLUMNS = ["query", "name", "address", "phone", "website", "rating", "reviews", "mapsUrl"];
let scrapedData = [];
let currentPage = 1;

const $ = id => document.getElementById(id);
const esc = v => String(v ?? "").replace(/[&<>"']/g, c => ({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"}[c]));

async function scrape() {
  const query = $("queryInput").value.trim();
  if (!query) { alert("Enter a query first."); return; }
  $("loading").classList.remove("hidden");
  $("resultSection").classList.add("hidden");
  try {
    const res = await fetch(`/scrape?query=${encodeURIComponent(query)}&limit=${$("responseLimit").value}`);
    const data = await res.json();
    if (!res.ok) throw new Error(data.error || res.statusText);
    scrapedData = data.results || [];
    currentPage = 1;
    renderTable();
    $("resultSection").classList.remove("hidden");
    htmx.trigger("#stored", "refresh");
  } catch (err) {
    alert("Error: " + err.message);
  }
  $("loading").classList.add("hidden");
}

function pageCount() { return Math.max(1, Math.ceil(scrapedData.length / ROWS_PER_PAGE)); }

function renderTable() {
  const body = document.querySelector("#resultTable tbody");
  const start = (currentPage - 1) * ROWS_PER_PAGE;
  body.innerHTML = scrapedData.slice(start, start + ROWS_PER_PAGE).map(item => `
    <tr>
      <td class="px-3 py-2 text-sm">${esc(item.name)}</td>
      <td class="px-3 py-2 text-sm">${esc(item.address)}</td>
      <td class="px-3 py-2 text-sm">${esc(item.phone)}</td>
      <td class="px-3 py-2 text-sm">${esc(item.website)}</td>
      <td class="px-3 py-2 text-sm">${esc(item.rating)}</td>
      <td class="px-3 py-2 text-sm">${esc(item.reviews)}</td>
      <td class="px-3 py-2 text-sm"><a class="underline" href="${esc(item.mapsUrl)}" target="_blank">Open</a></td>
    </tr>`).join("");
  $("pageInfo").innerText = `Page ${currentPage} of ${pageCount()}`;
}

function exportCSV() {
  if (!scrapedData.length) return;
  const quote = v => `"${String(v ?? "").replace(/"/g, '""')}"`;
  const lines = [COLUMNS.join(",")].concat(scrapedData.map(d => COLUMNS.map(c => quote(d[c])).join(",")));
  const link = document.createElement("a");
  link.href = URL.createObjectURL(new Blob([lines.join("\\n") + "\\n"], { type: "text/csv" }));
  link.download = "scraped_results.csv";
  link.click();
}

$("scrapeBtn").addEventListener("click", scrape);
$("exportCSV").addEventListener("click", exportCSV);
$("prevPage").addEventListener("click", () => { if (currentPage > 1) { currentPage--; renderTable(); } });
$("nextPage").addEventListener("click", () => { if (currentPage < pageCount()) { currentPage++; renderTable(); } });
$("responseLimit").addEventListener("change", e => {
  if (e.target.value < 1) e.target.value = 1;
  if (e.target.value > __MAX_LIMIT__) e.target.value = __MAX_LIMIT__;
});
</script>
</body></html>'''


def _cell(value: Optional[str]) -> str:
    return f'<td class="px-3 py-2 text-sm">{html.escape(value or "")}</td>'


@router.get('/', response_class=HTMLResponse)
async def index():
    """Main page: scrape form, result table and stored places."""
    return HTMLResponse(INDEX_HTML.replace("__MAX_LIMIT__", str(config.MAX_LIMIT)))


@router.get('/ui/table', response_class=HTMLResponse)
async def ui_table(q: Optional[str] = None, page: int = 1):
    """Generate HTML table with stored places."""
    try:
        page = max(1, page)
        total = get_places_count(q)
        places = get_places(q, ROWS_PER_PAGE, (page - 1) * ROWS_PER_PAGE)

        html_parts = ['<div class="bg-white rounded-xl shadow border overflow-x-auto">']
        html_parts.append('<table class="min-w-full divide-y divide-slate-200">')
        html_parts.append('<thead class="bg-slate-50"><tr>')
        for header in ["Query", "Name", "Address", "Phone", "Website", "Rating", "Reviews", "Maps", "Last seen"]:
            html_parts.append(f'<th class="px-3 py-2 text-left text-xs font-semibold">{header}</th>')
        html_parts.append('</tr></thead><tbody class="divide-y divide-slate-100">')

        for place in places:
            maps_url = html.escape(place.get('maps_url') or '', quote=True)
            html_parts.append('<tr>')
            for key in ("query", "name", "address", "phone", "website", "rating", "reviews"):
                html_parts.append(_cell(place.get(key)))
            link = f'<a class="underline" href="{maps_url}" target="_blank">Open</a>' if maps_url else ''
            html_parts.append(f'<td class="px-3 py-2 text-sm">{link}</td>')
            html_parts.append(_cell((place.get('last_seen') or '')[:19].replace('T', ' ')))
            html_parts.append('</tr>')

        if not places:
            html_parts.append('<tr><td colspan="9" class="px-3 py-6 text-center text-slate-500">No places stored yet</td></tr>')
        html_parts.append('</tbody></table></div>')

        # Pagination
        pages = max(1, (total + ROWS_PER_PAGE - 1) // ROWS_PER_PAGE)
        html_parts.append('<div class="flex items-center gap-2 mt-3 text-sm">')
        if page > 1:
            html_parts.append(f'<button class="px-3 py-1 rounded border" hx-get="/ui/table?page={page - 1}" hx-target="#stored">Prev</button>')
        html_parts.append(f'<span>Page {page} of {pages} ({total} places)</span>')
        if page < pages:
            html_parts.append(f'<button class="px-3 py-1 rounded border" hx-get="/ui/table?page={page + 1}" hx-target="#stored">Next</button>')
        html_parts.append('</div>')

        return HTMLResponse(''.join(html_parts))

    except Exception as e:
        logger.error(f"Error generating places table: {e}")
        return HTMLResponse('<div class="text-red-600">Error loading places</div>', status_code=500)
