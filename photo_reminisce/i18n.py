"""
Photo Reminisce user-facing messages
"""

from typing import Dict

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "app_name": "Photo Reminisce",

        # Intake
        "error_not_image": "Please upload an image file",
        "error_conversion": "Failed to convert HEIC image. Please try another file format.",
        "error_process_image": "Failed to process image. Please try another one.",
        "msg_date_defaulted": "No capture date found in {filename}, using the current time",

        # Export
        "msg_export_done": "Saved {filename}",
        "error_export": "Failed to export {filename}: {error}",
        "error_export_running": "An export is already running",
        "msg_batch_progress": "Exporting {current}/{total} ({percent}%)",
        "msg_batch_done": "Exported all {total} photos",
        "msg_batch_partial": "Exported {saved} of {total} photos, {failed} failed",
        "msg_no_photos": "No photos to export",

        # Styles
        "error_style_not_found": "Style preset not found: {name}",
    },
    "zh-CN": {
        "app_name": "Photo Reminisce",

        "error_not_image": "请上传图片文件",
        "error_conversion": "HEIC 图片转换失败，请尝试其他格式",
        "error_process_image": "图片处理失败，请换一张试试",
        "msg_date_defaulted": "{filename} 中没有拍摄时间，使用当前时间",

        "msg_export_done": "已保存 {filename}",
        "error_export": "导出 {filename} 失败: {error}",
        "error_export_running": "已有导出任务正在进行",
        "msg_batch_progress": "正在导出 {current}/{total} ({percent}%)",
        "msg_batch_done": "已导出全部 {total} 张照片",
        "msg_batch_partial": "已导出 {saved}/{total} 张照片，{failed} 张失败",
        "msg_no_photos": "没有可导出的照片",

        "error_style_not_found": "样式不存在: {name}",
    },
}


class I18n:
    """Language selection for messages"""

    _instance = None
    _current_language = "en"

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def set_language(cls, lang: str):
        if lang in TRANSLATIONS:
            cls._current_language = lang

    @classmethod
    def get_language(cls) -> str:
        return cls._current_language

    @classmethod
    def t(cls, key: str, **kwargs) -> str:
        """Translated text for ``key``, falling back to English then to the key itself"""
        translations = TRANSLATIONS.get(cls._current_language, TRANSLATIONS["en"])
        text = translations.get(key) or TRANSLATIONS["en"].get(key, key)

        if kwargs:
            try:
                text = text.format(**kwargs)
            except KeyError:
                pass

        return text


def t(key: str, **kwargs) -> str:
    return I18n.t(key, **kwargs)


def batch_result_message(summary) -> str:
    """One-line completion notice for an ExportSummary"""
    if summary.total == 0:
        return t("msg_no_photos")
    if summary.all_saved:
        return t("msg_batch_done", total=summary.total)
    return t("msg_batch_partial", saved=summary.saved, total=summary.total, failed=len(summary.failed))
