from .timestamps import iso


def normalize_page(page, include_content=True):
    data = {
        "id": page.id,
        "project_id": page.project_id,
        "path": page.path,
        "version": page.version,
        "status": page.status,
        "created_at": iso(page.created_at),
        "updated_at": iso(page.updated_at),
    }

    if include_content:
        data["sections"] = page.sections or []
        data["edit_chat_history"] = page.edit_chat_history

    return data


def normalize_versions(pages):
    """Newest version first, the way the version history lists them."""
    ordered = sorted(pages, key=lambda p: p.version, reverse=True)
    return [normalize_page(p, include_content=False) for p in ordered]
