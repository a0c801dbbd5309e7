"""Element resolution for click and fill.

Pages rarely expose one canonical way to address an element, so both actions
walk a fixed, ordered table of strategies and commit to the first one whose
locate *and* action succeed.  A strategy that finds an element but whose
action then fails counts as a failed strategy.

Click strategies are gated by the targeting fields the caller supplied: a
caller that only passes ``selector`` never triggers role or text lookups.
Fill strategies are all tried, in order, against the same field string.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from patchright.async_api import Error as PlaywrightError

from playwright_bridge.errors import ResolutionError, describe_params

logger = logging.getLogger("playwright_bridge.resolver")

Act = Callable[[Any], Awaitable[Any]]


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClickTarget:
    """Targeting fields accepted by ``click``."""

    role: str | None = None
    name: str | None = None
    text: str | None = None
    selector: str | None = None
    test_id: str | None = None

    @classmethod
    def from_params(cls, params: dict[str, Any]) -> ClickTarget:
        return cls(
            role=params.get("role"),
            name=params.get("name"),
            text=params.get("text"),
            selector=params.get("selector"),
            test_id=params.get("testId", params.get("test_id")),
        )

    def describe(self) -> str:
        return describe_params(
            {
                "role": self.role,
                "name": self.name,
                "text": self.text,
                "selector": self.selector,
                "testId": self.test_id,
            }
        )


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Strategy:
    """One way of locating an element.

    ``locate(page, target)`` returns a locator, or ``None`` when the target
    does not carry what this strategy needs.
    """

    name: str
    locate: Callable[[Any, Any], Any | None]


@dataclass(frozen=True)
class Attempt:
    strategy: str
    applied: bool
    succeeded: bool
    error: BaseException | None = None


@dataclass
class Resolution:
    winner: Attempt | None = None
    tried: list[Attempt] = field(default_factory=list)

    @property
    def tried_names(self) -> list[str]:
        return [a.strategy for a in self.tried]

    @property
    def last_error(self) -> BaseException | None:
        for a in reversed(self.tried):
            if a.error is not None:
                return a.error
        return None


def _by_role(page: Any, target: ClickTarget) -> Any | None:
    if target.role and target.name:
        return page.get_by_role(target.role, name=target.name)
    return None


def _by_text(page: Any, target: ClickTarget) -> Any | None:
    if target.text:
        return page.get_by_text(target.text)
    return None


def _by_selector(page: Any, target: ClickTarget) -> Any | None:
    if target.selector:
        return page.locator(target.selector)
    return None


def _by_test_id(page: Any, target: ClickTarget) -> Any | None:
    if target.test_id:
        return page.get_by_test_id(target.test_id)
    return None


CLICK_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("role", _by_role),
    Strategy("text", _by_text),
    Strategy("selector", _by_selector),
    Strategy("test_id", _by_test_id),
)


def _quote_attr(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


FILL_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("label", lambda page, f: page.get_by_label(f)),
    Strategy("placeholder", lambda page, f: page.get_by_placeholder(f)),
    Strategy("name", lambda page, f: page.locator(f"[name={_quote_attr(f)}]")),
    Strategy("id", lambda page, f: page.locator(f"#{f}")),
    Strategy("test_id", lambda page, f: page.get_by_test_id(f)),
)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


async def attempt(strategy: Strategy, page: Any, target: Any, act: Act) -> Attempt:
    """Run one strategy: locate, then act.  Engine errors mark it failed."""
    try:
        locator = strategy.locate(page, target)
        if locator is None:
            return Attempt(strategy.name, applied=False, succeeded=False)
        await act(locator)
    except PlaywrightError as exc:
        logger.debug(f"Strategy {strategy.name!r} failed: {exc}")
        return Attempt(strategy.name, applied=True, succeeded=False, error=exc)
    return Attempt(strategy.name, applied=True, succeeded=True)


async def resolve_and_act(
    page: Any, strategies: tuple[Strategy, ...], target: Any, act: Act
) -> Resolution:
    """Try *strategies* in order and stop at the first success."""
    resolution = Resolution()
    for strategy in strategies:
        result = await attempt(strategy, page, target, act)
        if not result.applied:
            continue
        resolution.tried.append(result)
        if result.succeeded:
            resolution.winner = result
            break
    return resolution


def _timeout_kwargs(timeout: float | None) -> dict[str, Any]:
    return {} if timeout is None else {"timeout": timeout}


async def click(page: Any, params: dict[str, Any], timeout: float | None = None) -> str:
    """Click the element described by *params*; return the winning strategy."""
    target = ClickTarget.from_params(params)
    kwargs = _timeout_kwargs(timeout)

    resolution = await resolve_and_act(
        page, CLICK_STRATEGIES, target, lambda loc: loc.click(**kwargs)
    )
    if resolution.winner is not None:
        return resolution.winner.strategy
    if not resolution.tried:
        raise ResolutionError(
            "Invalid click parameters. Need role+name, text, selector or testId"
        )
    raise ResolutionError(
        f"Could not find element to click with provided parameters: {target.describe()}",
        resolution.tried_names,
    ) from resolution.last_error


async def fill(
    page: Any, field_name: str, value: str, timeout: float | None = None
) -> str:
    """Fill the input identified by *field_name*; return the winning strategy."""
    kwargs = _timeout_kwargs(timeout)

    resolution = await resolve_and_act(
        page, FILL_STRATEGIES, field_name, lambda loc: loc.fill(value, **kwargs)
    )
    if resolution.winner is not None:
        return resolution.winner.strategy
    raise ResolutionError(
        f"Could not find input field: {field_name}", resolution.tried_names
    ) from resolution.last_error
