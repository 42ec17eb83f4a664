from __future__ import annotations

from typing import Dict, Iterable

_LANGUAGE_CANONICAL_MAP: Dict[str, str] = {
    "": "",
    "en": "en_us",
    "en_us": "en_us",
    "en_gb": "en_us",
    "english": "en_us",
    "zh": "zh_cn",
    "zh_cn": "zh_cn",
    "zh_hans": "zh_cn",
    "zh_sg": "zh_cn",
    "chinese": "zh_cn",
}

_LANGUAGE_DISPLAY_NAMES: Dict[str, str] = {
    "en_us": "English",
    "zh_cn": "简体中文",
}

DEFAULT_LANGUAGE = "en_us"

MESSAGES: Dict[str, Dict[str, str]] = {
    "usage": {
        "en_us": (
            "Drop a D2R character save (*.d2s) onto this program to:\n"
            "1. mark Normal difficulty as completed (allows single-player play)\n"
            "2. unlock the first Act III waypoint on every difficulty\n"
            "The full profile also completes the quest log on every difficulty."
        ),
        "zh_cn": (
            "将D2R存档文件(*.d2s)拖到此程序上以实现：\n"
            "1. 标记该存档为已经完成普通难度（可进行单机游戏）\n"
            "2. 解锁所有难度A3第一个路点\n"
            "完整模式还会完成所有难度的任务。"
        ),
    },
    "invalid_save": {
        "en_us": "{name} is not a valid D2R save file!",
        "zh_cn": "{name} 不是合法的D2R存档文件！",
    },
    "file_not_found": {
        "en_us": "Save file not found: {path}",
        "zh_cn": "找不到存档文件：{path}",
    },
    "backup_written": {
        "en_us": "Backup written to {path}",
        "zh_cn": "已备份到 {path}",
    },
    "success": {
        "en_us": "Done! Applied the {profile} profile to {name}.",
        "zh_cn": "操作成功！已对 {name} 应用 {profile} 模式。",
    },
    "write_failed": {
        "en_us": "Could not write the save file.\n{error}",
        "zh_cn": "无法写入存档文件。\n{error}",
    },
    "press_to_close": {
        "en_us": "Press Enter to close",
        "zh_cn": "按回车键关闭",
    },
}


def _normalize_language_code(code: str) -> str:
    return str(code or "").strip().lower().replace("-", "_")


def _canonicalize_language_code(code: str) -> str:
    normalized = _normalize_language_code(code)
    return _LANGUAGE_CANONICAL_MAP.get(normalized, normalized)


def _iter_language_candidates(code: str) -> Iterable[str]:
    normalized = _normalize_language_code(code)
    candidates = [normalized]
    if "_" in normalized:
        candidates.append(normalized.split("_", 1)[0])
    candidates.append(DEFAULT_LANGUAGE)
    seen = set()
    for candidate in candidates:
        if not candidate:
            continue
        canonical_candidate = _canonicalize_language_code(candidate)
        if canonical_candidate not in seen:
            seen.add(canonical_candidate)
            yield canonical_candidate


def resolve_language(code: str) -> str:
    for candidate in _iter_language_candidates(code):
        if candidate in _LANGUAGE_DISPLAY_NAMES:
            return candidate
    return DEFAULT_LANGUAGE


def translate(language_code: str, key: str, **values: object) -> str:
    mapping = MESSAGES.get(key)
    if not mapping:
        return key
    text = mapping.get(resolve_language(language_code)) or mapping[DEFAULT_LANGUAGE]
    return text.format(**values) if values else text


def get_language_display_name(code: str, default: str) -> str:
    canonical = _canonicalize_language_code(code)
    if canonical in _LANGUAGE_DISPLAY_NAMES:
        return _LANGUAGE_DISPLAY_NAMES[canonical]
    base = canonical.split("_", 1)[0]
    if base in _LANGUAGE_DISPLAY_NAMES:
        return _LANGUAGE_DISPLAY_NAMES[base]
    return default


def available_languages() -> Dict[str, str]:
    return dict(_LANGUAGE_DISPLAY_NAMES)


def is_english(code: str) -> bool:
    return resolve_language(code).startswith("en")
