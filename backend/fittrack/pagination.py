# Overview: Page/limit parsing and the {data, pagination} list envelope.

from __future__ import annotations

import math

from flask import current_app, request


def page_params(default_limit: int | None = None) -> tuple[int, int]:
    """Read ?page and ?limit, clamping to 1-based pages and MAX_PAGE_LIMIT."""
    default_limit = default_limit or current_app.config.get("DEFAULT_PAGE_LIMIT", 20)
    max_limit = current_app.config.get("MAX_PAGE_LIMIT", 100)

    page = request.args.get("page", 1, type=int) or 1
    limit = request.args.get("limit", default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), max_limit)


def paginate(query, page: int, limit: int, serialize=None) -> dict:
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    data = [serialize(row) if serialize else row.to_dict() for row in rows]
    return {
        "data": data,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit) if limit else 0,
        },
    }
