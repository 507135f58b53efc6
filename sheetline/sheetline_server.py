import logging
import traceback
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from sheetline.config.config import load_config
from sheetline.editor.controller import EditorController
from sheetline.editor.service import TimelineService
from sheetline.store.client import StoreError, StoreTransportError
from sheetline.timeline.layout import render
from sheetline.timeline.markup import WIDTH_FIELD, page_url, render_page
from sheetline.utils.logging_setup import configure_logging

config = load_config()
configure_logging(log_file=config["log_file"], level=config["log_level"])
logger = logging.getLogger(__name__)

app = FastAPI(title="Sheetline Timeline Editor", version="0.1.0")

# CORS middleware setting
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

timeline_service: Optional[TimelineService] = None


def get_service() -> TimelineService:
    global timeline_service

    if timeline_service is None:
        timeline_service = TimelineService.from_config(config)
        logger.info(f"Timeline service initialized for {config['endpoint']}")

    return timeline_service


def new_controller(width: Optional[int] = None) -> EditorController:
    # No alert callback: each request collects its own alerts via pop_alerts().
    return EditorController(get_service(), viewport_width=width or config["viewport_width"])


def _positive_width(raw: Optional[str]) -> Optional[int]:
    try:
        width = int(float(raw))
    except (TypeError, ValueError):
        return None
    return width if width > 0 else None


async def _read_form(request: Request) -> Tuple[Dict[str, str], Optional[int]]:
    form = await request.form()
    data = {key: str(value) for key, value in form.items()}
    width = _positive_width(data.pop(WIDTH_FIELD, None))
    return data, width


def _redirect(width: Optional[int], alerts: List[str]) -> RedirectResponse:
    # Alerts travel in the redirect URL so only the requesting browser sees them.
    return RedirectResponse(page_url(width, alert=alerts), status_code=303)


class ItemPayload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    row: Optional[Union[int, str]] = Field(default=None, alias="_row")
    nation: Optional[str] = None
    category: Optional[str] = None
    yr: Optional[Union[int, str]] = None
    item: Optional[str] = None
    info: Optional[str] = None
    link: Optional[str] = None
    cite: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    loading: bool


def _load_or_raise():
    try:
        return get_service().load()
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except StoreTransportError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/", response_class=HTMLResponse)
def index(
    width: Optional[int] = None,
    edit: Optional[int] = None,
    add: Optional[int] = None,
    alert: List[str] = Query(default=[]),
):
    """
    Timeline page. ``edit`` opens the modal for a row, ``add`` opens an empty one,
    ``alert`` carries messages from a form post that just failed.
    """
    if width is not None and width <= 0:
        raise HTTPException(status_code=400, detail="width must be positive")

    controller = new_controller(width)
    controller.reload()
    if edit is not None:
        try:
            controller.open_row(edit)
        except KeyError:
            controller.alert(f"Item at row {edit} no longer exists.")
    elif add:
        controller.open(None)

    source = controller.view.source if controller.view else "remote"
    return render_page(
        controller.descriptors(),
        mode=controller.mode,
        title=controller.title,
        form=controller.form,
        width=width,
        alerts=list(alert) + controller.pop_alerts(),
        loading=controller.loading,
        source=source,
    )


@app.post("/items/save")
async def save_item(request: Request):
    data, width = await _read_form(request)
    controller = new_controller(width)
    # The redirected page reloads the sheet, so the controller skips its own reload.
    await run_in_threadpool(controller.submit, data, False)
    return _redirect(width, controller.pop_alerts())


@app.post("/items/{row}/delete")
async def delete_item(row: int, request: Request):
    data, width = await _read_form(request)
    confirmed = data.get("confirmed", "") == "1"
    controller = new_controller(width)
    await run_in_threadpool(controller.delete, row, lambda message: confirmed, False)
    return _redirect(width, controller.pop_alerts())


@app.get("/api/items")
def list_items():
    view = _load_or_raise()
    data = view.to_dict()
    data["loading"] = get_service().loading
    return data


@app.get("/api/layout")
def layout(width: Optional[float] = None):
    view = _load_or_raise()
    viewport = width or config["viewport_width"]
    if viewport <= 0:
        raise HTTPException(status_code=400, detail="width must be positive")
    return {
        "bounds": view.to_dict()["bounds"],
        "width": viewport,
        "items": [d.to_dict() for d in render(view.items, view.bounds, viewport)],
    }


@app.post("/api/items")
def save_item_api(payload: ItemPayload):
    fields = payload.model_dump(by_alias=True, exclude_none=True)
    try:
        action = get_service().save(fields)
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except StoreTransportError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "action": action}


@app.delete("/api/items/{row}")
def delete_item_api(row: int):
    try:
        get_service().delete(row)
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except StoreTransportError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting row {row}: {e}")
        logger.error(traceback.format_exc())
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "success", "action": "delete", "_row": row}


@app.get("/health")
def health():
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        loading=get_service().loading,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config["server_host"], port=int(config["server_port"]))
