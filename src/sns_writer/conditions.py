import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

ConditionValue = Union[str, List[str]]

MAX_CONDITION_FIELDS = 5
FIELD_TYPES = ("text", "single", "multi")
FIELD_TYPE_LABELS = {
    "text": "テキスト",
    "single": "単一選択",
    "multi": "複数選択",
}
EMPTY_VALUE_MARKER = "（未入力）"
MULTI_VALUE_SEPARATOR = "、"


@dataclass
class ConditionField:
    id: str
    label: str
    type: str = "text"
    options: List[str] = field(default_factory=list)

    @property
    def is_multi(self) -> bool:
        return self.type == "multi"

    @property
    def has_options(self) -> bool:
        return self.type in {"single", "multi"}


class ConditionModel:
    def __init__(self, max_fields: int = MAX_CONDITION_FIELDS) -> None:
        self.max_fields = max_fields
        self._fields: List[ConditionField] = []
        self._values: Dict[str, ConditionValue] = {}

    def __len__(self) -> int:
        return len(self._fields)

    @property
    def fields(self) -> List[ConditionField]:
        return list(self._fields)

    @property
    def values(self) -> Dict[str, ConditionValue]:
        return deepcopy(self._values)

    @property
    def can_add_field(self) -> bool:
        return len(self._fields) < self.max_fields

    def get_field(self, field_id: str) -> Optional[ConditionField]:
        for condition in self._fields:
            if condition.id == field_id:
                return condition
        return None

    def get_value(self, field_id: str, default: Any = None) -> Any:
        if field_id not in self._values:
            return default
        return deepcopy(self._values[field_id])

    def add_field(self) -> Optional[ConditionField]:
        if not self.can_add_field:
            return None
        condition = ConditionField(
            id=_new_id("cond"),
            label=f"条件{len(self._fields) + 1}",
        )
        self._fields.append(condition)
        return condition

    def remove_field(self, field_id: str) -> None:
        self._fields = [condition for condition in self._fields if condition.id != field_id]
        self._values.pop(field_id, None)

    def update_field(
        self,
        field_id: str,
        label: Optional[str] = None,
        field_type: Optional[str] = None,
        options: Optional[Sequence[str]] = None,
    ) -> None:
        condition = self.get_field(field_id)
        if condition is None:
            return

        if label is not None:
            condition.label = str(label)
        if options is not None:
            condition.options = [str(option) for option in options]
        if field_type in FIELD_TYPES:
            condition.type = field_type
            value = self._values.get(field_id)
            if field_id in self._values and _shape_differs(value, field_type):
                self._values[field_id] = _coerce_value(value, field_type)

    def update_value(self, field_id: str, value: Any) -> None:
        # Values are only kept for live fields; the shape is not checked.
        if self.get_field(field_id) is None:
            return
        if isinstance(value, (list, tuple)):
            self._values[field_id] = _dedupe(value)
            return
        self._values[field_id] = value

    def add_option(self, field_id: str, text: str = "") -> None:
        condition = self.get_field(field_id)
        if condition is None:
            return
        condition.options.append(str(text))

    def update_option(self, field_id: str, index: int, new_text: str) -> None:
        condition = self.get_field(field_id)
        if condition is None or not _in_range(condition.options, index):
            return
        condition.options[index] = str(new_text)

    def remove_option(self, field_id: str, index: int) -> None:
        condition = self.get_field(field_id)
        if condition is None or not _in_range(condition.options, index):
            return
        del condition.options[index]

    def render(self) -> str:
        lines = []
        for condition in self._fields:
            value = self._values.get(condition.id)
            lines.append(f"{condition.label}: {_render_value(value)}")
        return "\n".join(lines)


def _render_value(value: Any) -> str:
    if _is_empty(value):
        return EMPTY_VALUE_MARKER
    if isinstance(value, (list, tuple)):
        return MULTI_VALUE_SEPARATOR.join(str(item) for item in value)
    return str(value)


def _coerce_value(value: Any, new_type: str) -> ConditionValue:
    if new_type == "multi":
        if isinstance(value, (list, tuple)):
            return _dedupe(value)
        if _is_empty(value):
            return []
        return [str(value)]

    if isinstance(value, (list, tuple)):
        return str(value[0]) if value else ""
    return "" if value is None else value


def _shape_differs(value: Any, field_type: str) -> bool:
    is_list = isinstance(value, (list, tuple))
    return is_list != (field_type == "multi")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _dedupe(items: Sequence[Any]) -> List[str]:
    seen: List[str] = []
    for item in items:
        text = str(item)
        if text not in seen:
            seen.append(text)
    return seen


def _in_range(items: List[str], index: int) -> bool:
    return isinstance(index, int) and 0 <= index < len(items)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"
