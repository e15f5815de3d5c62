"""
List-valued columns (job requirements, profile skills) are stored as JSON text.
"""
import json


def load_string_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [str(item) for item in parsed]


def dump_string_list(items: list[str] | None) -> str:
    return json.dumps(list(items or []), ensure_ascii=False)
