"""Allure report helpers."""

from .allure_utils import attach_json, attach_png, attach_text, summarize_results

__all__ = [
    "attach_json",
    "attach_png",
    "attach_text",
    "summarize_results",
]
