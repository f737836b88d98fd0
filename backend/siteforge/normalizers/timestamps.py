from siteforge.utils.optimistic_lock import normalize_ts


def iso(ts):
    return normalize_ts(ts).isoformat() if ts is not None else None
