from pathlib import Path
import logging
import sys

import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from src.sns_writer.conditions import (  # noqa: E402
    FIELD_TYPE_LABELS,
    FIELD_TYPES,
    ConditionField,
    ConditionModel,
)
from src.sns_writer.gateway import GenerationGateway  # noqa: E402
from src.sns_writer.generation_feedback import build_generation_feedback  # noqa: E402
from src.sns_writer.prompt_builder import compose_generation_prompt  # noqa: E402
from src.sns_writer.settings import GatewaySettings  # noqa: E402

logging.basicConfig(level=logging.INFO)

PROMPT_PLACEHOLDER = (
    "例）ハンドセラピスサロンのInstagram投稿文を作って。"
    "30代女性向け、やさしい口調で、肩こりケアについて。"
)
NO_SELECTION = ""


@st.cache_resource
def get_gateway() -> GenerationGateway:
    return GenerationGateway(GatewaySettings.from_env())


def ensure_state() -> None:
    if "conditions" not in st.session_state:
        st.session_state.conditions = ConditionModel()
    if "prompt_text" not in st.session_state:
        st.session_state.prompt_text = ""
    if "last_result" not in st.session_state:
        st.session_state.last_result = None
    if "generating" not in st.session_state:
        st.session_state.generating = False
    if "notice" not in st.session_state:
        st.session_state.notice = ""


def get_conditions() -> ConditionModel:
    return st.session_state.conditions


def forget_widget_keys(prefix: str) -> None:
    for key in [key for key in st.session_state.keys() if str(key).startswith(prefix)]:
        del st.session_state[key]


def request_generation() -> None:
    if not str(st.session_state.prompt_text or "").strip():
        st.session_state.notice = "お題・条件・キーワードを入力してください。"
        return
    st.session_state.notice = ""
    st.session_state.last_result = None
    st.session_state.generating = True


def run_generation() -> None:
    full_prompt = compose_generation_prompt(st.session_state.prompt_text, get_conditions().render())
    try:
        with st.spinner("生成中..."):
            st.session_state.last_result = get_gateway().generate(full_prompt)
    finally:
        st.session_state.generating = False


def choice_list(condition: ConditionField, selected: list) -> list:
    choices = []
    for option in list(condition.options) + list(selected):
        if option and option not in choices:
            choices.append(option)
    return choices


def render_value_input(condition: ConditionField) -> None:
    model = get_conditions()
    value_key = f"value_{condition.id}_{condition.type}"

    if condition.is_multi:
        current = model.get_value(condition.id, [])
        selected = current if isinstance(current, list) else []
        picked = st.multiselect(
            "値",
            choice_list(condition, selected),
            default=selected,
            key=value_key,
            placeholder="選択してください",
        )
        model.update_value(condition.id, list(picked))
        return

    current = model.get_value(condition.id, "")
    current = current if isinstance(current, str) else ""
    if condition.type == "single":
        choices = [NO_SELECTION] + choice_list(condition, [current] if current else [])
        picked = st.selectbox(
            "値",
            choices,
            index=choices.index(current) if current in choices else 0,
            format_func=lambda x: x or "（選択なし）",
            key=value_key,
        )
        model.update_value(condition.id, picked or "")
        return

    typed = st.text_input("値", value=current, key=value_key)
    model.update_value(condition.id, typed)


def render_option_editor(condition: ConditionField) -> None:
    model = get_conditions()
    option_prefix = f"option_{condition.id}_"
    st.caption("選択肢")
    for index, option in enumerate(list(condition.options)):
        col_text, col_remove = st.columns([5, 1])
        text = col_text.text_input(
            f"選択肢{index + 1}",
            value=option,
            key=f"{option_prefix}{index}",
            label_visibility="collapsed",
        )
        if text != option:
            model.update_option(condition.id, index, text)
        if col_remove.button("削除", key=f"remove_{option_prefix}{index}"):
            model.remove_option(condition.id, index)
            forget_widget_keys(option_prefix)
            st.rerun()
    if st.button("＋ 選択肢を追加", key=f"add_{option_prefix}"):
        model.add_option(condition.id)
        forget_widget_keys(option_prefix)
        st.rerun()


def render_condition_field(condition: ConditionField) -> None:
    model = get_conditions()
    with st.container(border=True):
        col_label, col_type, col_remove = st.columns([3, 2, 1])
        label = col_label.text_input("項目名", value=condition.label, key=f"label_{condition.id}")
        if label != condition.label:
            model.update_field(condition.id, label=label)
        field_type = col_type.selectbox(
            "種類",
            FIELD_TYPES,
            index=FIELD_TYPES.index(condition.type),
            format_func=lambda x: FIELD_TYPE_LABELS[x],
            key=f"type_{condition.id}",
        )
        if field_type != condition.type:
            model.update_field(condition.id, field_type=field_type)
            st.rerun()
        if col_remove.button("削除", key=f"remove_{condition.id}"):
            model.remove_field(condition.id)
            forget_widget_keys(f"option_{condition.id}_")
            st.rerun()

        if condition.has_options:
            render_option_editor(condition)
        render_value_input(condition)


def render_condition_editor() -> None:
    model = get_conditions()
    st.markdown("### 条件")
    st.caption(f"最大{model.max_fields}件まで追加できます（{len(model)}/{model.max_fields}）")
    for condition in model.fields:
        render_condition_field(condition)
    if st.button("＋ 条件を追加", disabled=not model.can_add_field):
        model.add_field()
        st.rerun()


def render_result() -> None:
    feedback = build_generation_feedback(st.session_state.last_result)
    level = feedback["level"]
    if level == "none":
        return
    if level == "success":
        st.markdown(f"### {feedback['title']}")
        st.text(feedback["message"])
        return
    if level == "warning":
        st.warning(feedback["message"])
        return
    st.error(f"{feedback['title']}: {feedback['message']}")


st.set_page_config(page_title="SNS Writer", layout="centered")
st.title("SNS / note / ブログ 文章生成ツール")
ensure_state()

with st.sidebar:
    settings = get_gateway().settings
    st.markdown("### Generation")
    if settings.use_mock:
        st.caption("Mock mode: USE_MOCK_GENERATE=true (API is not called)")
    else:
        st.caption(f"Model: {settings.model}")
        st.caption(f"Key status: {'configured' if settings.api_key else 'not set'}")

st.text_area(
    "お題・条件・キーワード",
    key="prompt_text",
    height=140,
    placeholder=PROMPT_PLACEHOLDER,
)
render_condition_editor()

with st.expander("送信されるプロンプト", expanded=False):
    st.code(
        compose_generation_prompt(st.session_state.prompt_text, get_conditions().render()) or "（未入力）",
        language=None,
    )

busy = st.session_state.generating
st.button(
    "生成中..." if busy else "文章を生成する",
    type="primary",
    disabled=busy,
    on_click=request_generation,
)
if st.session_state.notice:
    st.warning(st.session_state.notice)

if busy:
    run_generation()
    st.rerun()

render_result()
