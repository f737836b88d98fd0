from .timestamps import iso


def normalize_skill(skill):
    return {
        "id": skill.id,
        "name": skill.name,
        "status": skill.status,
        "artifact": skill.artifact,
        "error": skill.error,
        "updated_at": iso(skill.updated_at),
    }
