from .page import normalize_page
from .timestamps import iso


def normalize_project(project, include_pages=False):
    data = {
        "id": project.id,
        "generated_hostname": project.generated_hostname,
        "status": project.status,
        "selected_place_id": project.selected_place_id,
        "selected_website_url": project.selected_website_url,
        "template_id": project.template_id,
        "primary_color": project.primary_color,
        "accent_color": project.accent_color,
        "step_gbp_scrape": project.step_gbp_scrape,
        "stage_artifacts": project.stage_artifacts or {},
        "created_at": iso(project.created_at),
        "updated_at": iso(project.updated_at),
    }

    if include_pages:
        pages = sorted(project.pages, key=lambda p: (p.path, p.version))
        data["pages"] = [normalize_page(p, include_content=False) for p in pages]

    return data


def normalize_template(template):
    return {
        "id": template.id,
        "name": template.name,
        "is_active": template.is_active,
        "pages": [
            {"id": p.id, "path": p.path, "name": p.name, "sections": p.sections or []}
            for p in template.pages
        ],
    }
