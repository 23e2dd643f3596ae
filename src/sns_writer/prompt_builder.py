CONDITION_SECTION_HEADER = "【条件】"


def compose_generation_prompt(prompt: str, condition_block: str) -> str:
    text = prompt or ""
    block = (condition_block or "").strip("\n")
    if not block:
        return text

    return (
        f"{text.rstrip()}\n\n"
        f"{CONDITION_SECTION_HEADER}\n"
        f"{block}"
    )
