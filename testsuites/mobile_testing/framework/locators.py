"""
================================================================================
Locators
================================================================================

Descriptive locator grammar for the MealMommy Flutter app:

    key("login_button")       stable identifier (semantics identifier)
    text("Sign In")           visible text
    type("TextField")[1]      structural/type name, second match

Each locator maps onto an Appium strategy. A UIElement groups the alternative
locators for one logical element, primary first.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple, Union

from appium.webdriver.common.appiumby import AppiumBy


class LocatorKind(str, Enum):
    KEY = "key"
    TEXT = "text"
    TYPE = "type"


_EXPRESSION_RE = re.compile(r'^(key|text|type)\("(.*)"\)(?:\[(\d+)\])?$', re.DOTALL)


def _xpath_literal(value: str) -> str:
    """Quote a string for use inside an XPath expression."""
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    parts = value.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


@dataclass(frozen=True)
class Locator:
    """
    One way of finding an element.

    Attributes:
        kind: key / text / type
        value: Identifier, visible text or type name
        index: Ordinal among multiple matches (0-based)
    """
    kind: LocatorKind
    value: str
    index: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", LocatorKind(self.kind))
        if self.index < 0:
            raise ValueError(f"Locator index must be >= 0, got {self.index}")

    @property
    def expression(self) -> str:
        base = f'{self.kind.value}("{self.value}")'
        return f"{base}[{self.index}]" if self.index else base

    @property
    def strategy(self) -> str:
        """Appium locator strategy used to query the device."""
        if self.kind is LocatorKind.KEY:
            return AppiumBy.ACCESSIBILITY_ID
        if self.kind is LocatorKind.TYPE:
            return AppiumBy.CLASS_NAME
        return AppiumBy.XPATH

    @property
    def query(self) -> str:
        """Query string for ``strategy``."""
        if self.kind is LocatorKind.TEXT:
            literal = _xpath_literal(self.value)
            return (
                f"//*[@text={literal} or @content-desc={literal} "
                f"or @label={literal} or @name={literal}]"
            )
        return self.value

    def __str__(self) -> str:
        return self.expression


def by_key(key: str, index: int = 0) -> Locator:
    return Locator(LocatorKind.KEY, key, index)


def by_text(text: str, index: int = 0) -> Locator:
    return Locator(LocatorKind.TEXT, text, index)


def by_type(type_name: str, index: int = 0) -> Locator:
    return Locator(LocatorKind.TYPE, type_name, index)


def parse_locator(expression: Union[str, Locator]) -> Locator:
    """
    Parse a locator expression such as ``type("TextField")[1]``.

    Raises:
        ValueError: Expression does not follow the grammar
    """
    if isinstance(expression, Locator):
        return expression
    match = _EXPRESSION_RE.match(expression.strip())
    if not match:
        raise ValueError(f"Invalid locator expression: {expression!r}")
    kind, value, index = match.groups()
    return Locator(LocatorKind(kind), value, int(index) if index else 0)


@dataclass(frozen=True)
class UIElement:
    """
    Logical UI element with ordered alternative locators (primary first).

    Usage:
        >>> login = UIElement.of("login_button", 'key("login_button")', 'text("Sign In")')
        >>> login.primary.expression
        'key("login_button")'
    """
    name: str
    candidates: Tuple[Locator, ...]

    def __post_init__(self) -> None:
        candidates = tuple(self.candidates)
        if not candidates:
            raise ValueError(f"Element '{self.name}' needs at least one locator")
        object.__setattr__(self, "candidates", candidates)

    @classmethod
    def of(cls, name: str, *locators: Union[str, Locator]) -> "UIElement":
        return cls(name, tuple(parse_locator(loc) for loc in locators))

    @property
    def primary(self) -> Locator:
        return self.candidates[0]

    def __iter__(self):
        return iter(self.candidates)

    def __len__(self) -> int:
        return len(self.candidates)


CandidatesLike = Union[UIElement, Locator, str, Iterable[Union[Locator, str]]]


def as_element(candidates: CandidatesLike, name: str = "custom_element") -> UIElement:
    """Normalize a UIElement, a single locator, or a sequence of locators."""
    if isinstance(candidates, UIElement):
        return candidates
    if isinstance(candidates, (Locator, str)):
        locator = parse_locator(candidates)
        return UIElement(name if name != "custom_element" else locator.expression, (locator,))
    return UIElement.of(name, *candidates)


__all__ = [
    "Locator",
    "LocatorKind",
    "UIElement",
    "by_key",
    "by_text",
    "by_type",
    "parse_locator",
    "as_element",
]
