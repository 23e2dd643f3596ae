from typing import Dict, Optional

from .gateway import GenerationResult, ValidationError

GENERIC_ERROR_MESSAGE = "エラーが発生しました"


def build_generation_feedback(result: Optional[GenerationResult]) -> Dict[str, str]:
    if result is None:
        return {"level": "none", "title": "", "message": ""}

    if result.ok:
        text = result.text or ""
        if not text:
            return {
                "level": "warning",
                "title": "生成結果",
                "message": "生成結果が空でした。条件を変えて再度お試しください。",
            }
        return {"level": "success", "title": "生成結果", "message": text}

    message = str(result.error.message or "").strip()
    if isinstance(result.error, ValidationError):
        return {
            "level": "warning",
            "title": "入力エラー",
            "message": message or GENERIC_ERROR_MESSAGE,
        }

    return {
        "level": "error",
        "title": "生成に失敗しました",
        "message": message or GENERIC_ERROR_MESSAGE,
    }
