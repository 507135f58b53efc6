"""
HTML rendering of the timeline page.

Pure string building: takes render descriptors plus modal state and returns
a complete document. Items link to ``/?edit=<row>``; the page reloads itself
with the new ``width`` when the browser window is resized.
"""

from html import escape
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlencode

from sheetline.store.models import ITEM_FIELDS, ROW_FIELD

from .layout import RenderDescriptor

WIDTH_FIELD = "_width"

FIELD_LABELS = {
    "nation": "Nation",
    "category": "Category",
    "yr": "Year",
    "item": "Item",
    "info": "Info",
    "link": "Link",
    "cite": "Cite",
}

PAGE_CSS = """
body { margin: 0; font-family: sans-serif; background: #111; color: #eee; }
#toolbar { position: fixed; top: 0; left: 0; right: 0; height: 3rem; display: flex; gap: 1rem;
           align-items: center; padding: 0 1rem; background: #222; z-index: 2; }
#timeline-container { position: relative; margin-top: 3rem; overflow-x: hidden; }
#timeline-content { position: relative; }
.timeline-item { position: absolute; box-sizing: border-box; padding: 0.1rem 0.4rem; cursor: pointer;
                 border-left: 2px solid #4af; color: inherit; text-decoration: none; white-space: nowrap; }
.timeline-item:hover { background: #333; }
.item-title { font-size: 0.85rem; }
.item-desc { font-size: 0.7rem; color: #aaa; overflow: hidden; text-overflow: ellipsis; }
.tag { font-size: 0.65rem; padding: 0 0.3rem; border-radius: 0.2rem; background: #345; }
.alert { background: #a33; padding: 0.5rem 1rem; margin-top: 3rem; }
#loading-indicator { color: #fc6; }
#modal-overlay { position: fixed; inset: 0; background: rgba(0, 0, 0, 0.6); z-index: 3;
                 display: flex; align-items: center; justify-content: center; }
#modal-backdrop { position: absolute; inset: 0; }
#item-form { position: relative; background: #222; padding: 1rem 1.5rem; min-width: 24rem;
             display: grid; grid-template-columns: 6rem 1fr; gap: 0.4rem 0.8rem; }
#item-form h2, #item-form .actions { grid-column: 1 / 3; }
.hidden { display: none; }
"""

RESIZE_JS = """
(function () {
  var timer = null;
  document.querySelectorAll('input[name="_width"]').forEach(function (input) {
    input.value = window.innerWidth;
  });
  window.addEventListener('resize', function () {
    clearTimeout(timer);
    timer = setTimeout(function () {
      var params = new URLSearchParams(window.location.search);
      params.delete('alert');
      params.set('width', window.innerWidth);
      window.location.search = params.toString();
    }, 200);
  });
  var params = new URLSearchParams(window.location.search);
  if (params.get('width') !== String(window.innerWidth)) {
    params.set('width', window.innerWidth);
    window.location.replace('?' + params.toString());
  }
})();
"""


def page_url(width: Optional[float] = None, **params) -> str:
    query = {k: v for k, v in params.items() if v is not None and v != []}
    if width is not None:
        query = {"width": int(width), **query}
    return "/?" + urlencode(query, doseq=True) if query else "/"


def render_item(desc: RenderDescriptor, width: Optional[float] = None) -> str:
    href = escape(page_url(width, edit=desc.row))
    return (
        f'<a class="timeline-item" data-row="{desc.row}" href="{href}" '
        f'onclick="event.stopPropagation()" '
        f'style="left: {desc.x:.2f}px; top: {desc.y}rem; width: {desc.width}px">'
        f'<div class="item-title">{escape(desc.year_label)} {escape(desc.title)} '
        f'<span class="tag">{escape(desc.nation)}</span> '
        f'<span class="tag">{escape(desc.category)}</span></div>'
        f'<div class="item-desc">{escape(desc.description)}</div>'
        f"</a>"
    )


def render_modal(mode: str, title: str, form: Dict[str, str], width: Optional[float] = None) -> str:
    close_href = escape(page_url(width))
    hidden = " hidden" if mode == "closed" else ""
    row = form.get(ROW_FIELD, "")
    width_input = f'<input type="hidden" name="{WIDTH_FIELD}" value="{int(width) if width else ""}">'

    fields: List[str] = [f'<input type="hidden" id="edit-row" name="{ROW_FIELD}" value="{escape(row)}">', width_input]
    for name in ITEM_FIELDS:
        value = escape(form.get(name, ""))
        label = f'<label for="edit-{name}">{FIELD_LABELS[name]}</label>'
        if name == "info":
            control = f'<textarea id="edit-{name}" name="{name}" rows="3">{value}</textarea>'
        elif name == "yr":
            control = f'<input type="text" inputmode="numeric" id="edit-{name}" name="{name}" value="{value}">'
        elif name == "link":
            control = f'<input type="url" id="edit-{name}" name="{name}" value="{value}">'
        else:
            control = f'<input type="text" id="edit-{name}" name="{name}" value="{value}">'
        fields.append(label + control)

    delete_form = ""
    if mode == "edit" and row:
        delete_action = escape(f"/items/{row}/delete")
        delete_form = (
            f'<form method="post" action="{delete_action}" '
            f'onsubmit="return confirm(\'Are you sure you want to delete this item?\')">'
            f'<input type="hidden" name="confirmed" value="1">'
            f"{width_input}"
            f'<button type="submit" id="delete-btn">Delete</button></form>'
        )

    return (
        f'<div id="modal-overlay" class="modal{hidden}">'
        f'<a id="modal-backdrop" href="{close_href}" aria-label="Close"></a>'
        f'<form id="item-form" method="post" action="/items/save">'
        f'<h2 id="modal-title">{escape(title)}</h2>'
        + "".join(fields)
        + f'<div class="actions"><button type="submit">Save</button> '
        f'<a id="close-modal" href="{close_href}">Cancel</a></div>'
        f"</form>{delete_form}</div>"
    )


def render_page(
    descriptors: Sequence[RenderDescriptor],
    mode: str = "closed",
    title: str = "Add New Item",
    form: Optional[Dict[str, str]] = None,
    width: Optional[float] = None,
    alerts: Sequence[str] = (),
    loading: bool = False,
    source: str = "remote",
) -> str:
    items_html = "\n".join(render_item(d, width) for d in descriptors)
    height = (descriptors[-1].y + 4) if descriptors else 4
    alerts_html = "".join(f'<div class="alert" role="alert">{escape(a)}</div>' for a in alerts)
    source_note = ' <span class="tag">sample data</span>' if source == "sample" else ""
    loading_class = "" if loading else " hidden"
    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        "<title>Timeline</title>"
        f"<style>{PAGE_CSS}</style></head><body>"
        f'<div id="toolbar"><strong>Timeline</strong>{source_note}'
        f'<a id="add-item-btn" href="{escape(page_url(width, add=1))}">+ Add</a>'
        f'<span id="loading-indicator" class="{loading_class.strip()}">Loading...</span></div>'
        f"{alerts_html}"
        f'<div id="timeline-container"><div id="timeline-content" style="height: {height}rem">'
        f"{items_html}</div></div>"
        f"{render_modal(mode, title, form or {}, width)}"
        f"<script>{RESIZE_JS}</script>"
        "</body></html>"
    )
