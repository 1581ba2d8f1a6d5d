"""
List editing for course content.

Highlights, curriculum weeks, topics inside a week, schedule entries and FAQ
entries are ordered lists edited by index. Every function returns a new list
and leaves its input untouched. Curriculum weeks are always numbered 1..n in
list order.
"""
from copy import deepcopy

from academy.core.errors import ValidationFailed


def blank_week(position: int) -> dict:
    return {"week": position + 1, "title": "", "topics": []}


def _check_index(items: list, index: int | None) -> int:
    if index is None or index < 0 or index >= len(items):
        raise ValidationFailed("Item index out of range")
    return index


def add_item(items: list, item=None) -> list:
    out = deepcopy(items)
    out.append(deepcopy(item) if item is not None else "")
    return out


def update_item(items: list, index: int | None, item) -> list:
    out = deepcopy(items)
    i = _check_index(out, index)
    if isinstance(out[i], dict) and isinstance(item, dict):
        out[i] = {**out[i], **item}
    else:
        out[i] = deepcopy(item)
    return out


def remove_item(items: list, index: int | None) -> list:
    i = _check_index(items, index)
    return deepcopy(items[:i] + items[i + 1 :])


def move_item(items: list, index: int | None, to_index: int | None) -> list:
    out = deepcopy(items)
    i = _check_index(out, index)
    j = _check_index(out, to_index)
    moved = out.pop(i)
    out.insert(j, moved)
    return out


def renumber_weeks(curriculum: list[dict]) -> list[dict]:
    return [{**week, "week": i + 1} for i, week in enumerate(curriculum)]


def _blank(value) -> bool:
    return not str(value or "").strip()


def clean_highlights(highlights: list[str]) -> list[str]:
    return [h for h in highlights if not _blank(h)]


def clean_curriculum(curriculum: list[dict]) -> list[dict]:
    return renumber_weeks(
        [{**week, "topics": [t for t in week.get("topics", []) if not _blank(t)]} for week in curriculum]
    )


def clean_schedule(schedule: list[dict]) -> list[dict]:
    return [s for s in schedule if not (_blank(s.get("day")) and _blank(s.get("time")) and _blank(s.get("topic")))]


def clean_faq(faq: list[dict]) -> list[dict]:
    return [f for f in faq if not (_blank(f.get("question")) and _blank(f.get("answer")))]


_CLEANERS = {
    "highlights": clean_highlights,
    "topics": clean_highlights,
    "schedule": clean_schedule,
    "faq": clean_faq,
}


def clean_content(*, highlights: list, curriculum: list, schedule: list, faq: list) -> dict:
    """Drop empty entries before a course is saved."""
    return {
        "highlights": clean_highlights(highlights),
        "curriculum": clean_curriculum(curriculum),
        "schedule": clean_schedule(schedule),
        "faq": clean_faq(faq),
    }


def apply_edit(
    content: dict,
    *,
    section: str,
    op: str,
    index: int | None = None,
    to_index: int | None = None,
    week_index: int | None = None,
    item=None,
) -> dict:
    """Apply one list edit to `content` (keys: highlights, curriculum, schedule, faq)."""
    content = deepcopy(content)

    if section == "topics":
        curriculum = content.get("curriculum", [])
        w = _check_index(curriculum, week_index)
        week = curriculum[w]
        week["topics"] = _apply(week.get("topics", []), "topics", op, index, to_index, item)
        content["curriculum"] = curriculum
        return content

    if section not in ("highlights", "curriculum", "schedule", "faq"):
        raise ValidationFailed(f"Unknown section: {section}")

    items = _apply(content.get(section, []), section, op, index, to_index, item)
    if section == "curriculum":
        items = renumber_weeks(items)
    content[section] = items
    return content


def _check_item(section: str, item) -> None:
    expected = str if section in ("highlights", "topics") else dict
    if not isinstance(item, expected):
        raise ValidationFailed(f"Invalid item for section {section}")


def _apply(items: list, section: str, op: str, index, to_index, item) -> list:
    if op in ("add", "update") and item is not None:
        _check_item(section, item)
    if op == "add":
        # Only a week may be added empty.
        if item is None and section == "curriculum":
            item = blank_week(len(items))
        elif item is None or (section in _CLEANERS and not _CLEANERS[section]([item])):
            raise ValidationFailed("Missing item")
        return add_item(items, item)
    if op == "update":
        if item is None:
            raise ValidationFailed("Missing item")
        return update_item(items, index, item)
    if op == "remove":
        return remove_item(items, index)
    if op == "move":
        return move_item(items, index, to_index)
    raise ValidationFailed(f"Unknown operation: {op}")
