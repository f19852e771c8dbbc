# ================================================================================
# Gestures Module
# ================================================================================
#
# Touch gestures expressed as (press, wait, move, release) sequences and sent to
# the device through W3C actions.
#
# Gestures are fire-and-forget: nothing here checks what the screen did
# afterwards. Re-resolve elements to confirm the effect.
#
# Usage:
#   gesture = scroll_down(driver.get_window_size())
#   perform(driver, gesture)
#
# ================================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

from loguru import logger
from selenium.webdriver.common.actions import interaction
from selenium.webdriver.common.actions.action_builder import ActionBuilder
from selenium.webdriver.common.actions.pointer_input import PointerInput


class StepType(str, Enum):
    PRESS = "press"
    WAIT = "wait"
    MOVE = "move"
    RELEASE = "release"


@dataclass(frozen=True)
class GestureStep:
    """Single touch primitive. Coordinates for press/move, ms for wait."""
    type: StepType
    x: int = 0
    y: int = 0
    ms: int = 0


@dataclass(frozen=True)
class Gesture:
    name: str
    steps: Tuple[GestureStep, ...]


def press(x: int, y: int) -> GestureStep:
    return GestureStep(StepType.PRESS, x=x, y=y)


def wait(ms: int) -> GestureStep:
    return GestureStep(StepType.WAIT, ms=ms)


def move(x: int, y: int) -> GestureStep:
    return GestureStep(StepType.MOVE, x=x, y=y)


def release() -> GestureStep:
    return GestureStep(StepType.RELEASE)


def swipe(
    start: Tuple[int, int],
    end: Tuple[int, int],
    hold_ms: int = 500,
    name: str = "swipe",
) -> Gesture:
    """Press at start, hold, drag to end, release."""
    return Gesture(
        name=name,
        steps=(
            press(*start),
            wait(hold_ms),
            move(*end),
            release(),
        ),
    )


def vertical_swipe(
    window_size: Dict[str, Any],
    start_ratio: float,
    end_ratio: float,
    hold_ms: int = 500,
    name: str = "vertical_swipe",
) -> Gesture:
    """
    Swipe along the horizontal centre of the screen.

    Args:
        window_size: {"width": ..., "height": ...} as returned by the driver
        start_ratio: Start height as a fraction of screen height
        end_ratio: End height as a fraction of screen height
        hold_ms: Hold time after the press
    """
    width = int(window_size["width"])
    height = int(window_size["height"])
    center_x = width // 2
    return swipe(
        (center_x, round(height * start_ratio)),
        (center_x, round(height * end_ratio)),
        hold_ms=hold_ms,
        name=name,
    )


def scroll_down(window_size: Dict[str, Any]) -> Gesture:
    # Finger moves up, content scrolls down
    return vertical_swipe(window_size, 0.8, 0.2, name="scroll_down")


def scroll_up(window_size: Dict[str, Any]) -> Gesture:
    return vertical_swipe(window_size, 0.2, 0.8, name="scroll_up")


def pull_to_refresh(window_size: Dict[str, Any]) -> Gesture:
    return vertical_swipe(window_size, 0.3, 0.7, name="pull_to_refresh")


def perform(driver: Any, gesture: Gesture) -> None:
    """
    Send a gesture to the device as one touch pointer action sequence.

    Blocking; call through ``asyncio.to_thread`` from async code.
    """
    actions = ActionBuilder(driver, mouse=PointerInput(interaction.POINTER_TOUCH, "finger"))
    pointer = actions.pointer_action

    for step in gesture.steps:
        if step.type is StepType.PRESS:
            pointer.move_to_location(step.x, step.y)
            pointer.pointer_down()
        elif step.type is StepType.WAIT:
            pointer.pause(step.ms / 1000)
        elif step.type is StepType.MOVE:
            pointer.move_to_location(step.x, step.y)
        elif step.type is StepType.RELEASE:
            pointer.release()

    actions.perform()
    logger.debug(f"Gesture performed: {gesture.name} ({len(gesture.steps)} steps)")


__all__ = [
    "Gesture",
    "GestureStep",
    "StepType",
    "swipe",
    "vertical_swipe",
    "scroll_down",
    "scroll_up",
    "pull_to_refresh",
    "perform",
]
