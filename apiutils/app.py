import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Config
from .core.errors import AppError, not_found
from .core.fields import constrained
from .core.http import get_limit_param, get_page_param, read_json
from .core.middleware import app_error_handler, global_exception_handler, log_requests
from .core.response import (
    write_created_response,
    write_error_response,
    write_no_content_response,
    write_success_response,
)
from .core.validation import validate_struct

logger = logging.getLogger(__name__)


@dataclass
class CreateItemRequest:
    name: str = constrained(required=True, min=3, json="name")
    tags: List[str] = constrained(min=1, json="tags", default_factory=list)
    description: Optional[str] = constrained(json="description,omitempty", default=None)
    quantity: int = constrained(json="quantity,omitempty", default=0)


@dataclass
class Item:
    id: str = constrained(json="id")
    name: str = constrained(json="name")
    tags: List[str] = constrained(json="tags")
    quantity: int = constrained(json="quantity")
    created_at: str = constrained(json="createdAt")
    description: Optional[str] = constrained(json="description,omitempty", default=None)


# In-memory store, keyed by item id in insertion order
ITEMS: Dict[str, Item] = {}


# Initialize FastAPI
app = FastAPI(title="API Utils Demo")

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_error_handler)


@app.middleware("http")
async def _log_requests(request, call_next):
    return await log_requests(request, call_next)


@app.exception_handler(Exception)
async def _global_exception_handler(request, exc):
    return await global_exception_handler(request, exc)


@app.get("/")
async def root():
    """Return basic API information."""
    return write_success_response({
        "service": "API Utils Demo",
        "version": "1.0",
        "endpoints": {
            "items": "/items",
            "health": "/health",
        },
        "timestamp": datetime.now().isoformat(),
    })


@app.get("/health")
async def health_check():
    Config.validate()
    return write_success_response({"status": "ok"})


@app.post("/items")
async def create_item(request: Request):
    """Decode, validate and store a new item.

    Validation failures are written as 400 envelopes; decoding failures are
    raised and rendered by the AppError handler.
    """
    payload = await read_json(request, CreateItemRequest)
    error = validate_struct(payload)
    if error is not None:
        logger.info(f"Rejected item: {error.message}")
        return write_error_response(error)

    item = Item(
        id=uuid.uuid4().hex,
        name=payload.name,
        tags=list(payload.tags),
        quantity=payload.quantity,
        created_at=datetime.now().isoformat(),
        description=payload.description,
    )
    ITEMS[item.id] = item
    return write_created_response(item)


@app.get("/items")
async def list_items(request: Request):
    page = get_page_param(request)
    limit = get_limit_param(request)
    items = list(ITEMS.values())
    offset = (page - 1) * limit
    return write_success_response({
        "items": items[offset:offset + limit],
        "page": page,
        "limit": limit,
        "total": len(items),
    })


@app.get("/items/{item_id}")
async def get_item(item_id: str):
    item = ITEMS.get(item_id)
    if item is None:
        raise not_found(f"Item {item_id} not found")
    return write_success_response(item)


@app.delete("/items/{item_id}")
async def delete_item(item_id: str):
    if ITEMS.pop(item_id, None) is None:
        raise not_found(f"Item {item_id} not found")
    return write_no_content_response()
