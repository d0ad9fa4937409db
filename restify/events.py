"""
Lifecycle event listeners.

- starting: called once per listener with the registry when the app starts
- before_each: called with the request before every repository dispatch
- exception render/report: single-slot callbacks for any exception raised
  while serving a restify request

Listeners run synchronously in registration order; exceptions propagate.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

StartingListener = Callable[[Any], None]
BeforeEachListener = Callable[[Any], None]
RenderCallback = Callable[[Any, Exception], Any]
ReportCallback = Callable[[Exception], None]


class RestifyEvents:
    def __init__(self) -> None:
        self.starting_listeners: List[StartingListener] = []
        self.before_each_listeners: List[BeforeEachListener] = []
        self.render_callback: Optional[RenderCallback] = None
        self.report_callback: Optional[ReportCallback] = None

    def on_starting(self, callback: StartingListener) -> StartingListener:
        self.starting_listeners.append(callback)
        return callback

    def on_before_each(self, callback: BeforeEachListener) -> BeforeEachListener:
        self.before_each_listeners.append(callback)
        return callback

    def on_exception(self, callback: RenderCallback) -> RenderCallback:
        """Set the callback rendering request exceptions; replaces any previous one."""
        self.render_callback = callback
        return callback

    def report_using(self, callback: ReportCallback) -> ReportCallback:
        self.report_callback = callback
        return callback

    def dispatch_starting(self, registry) -> None:
        logger.debug("restify_starting: listeners=%d", len(self.starting_listeners))
        for listener in list(self.starting_listeners):
            listener(registry)

    def dispatch_before_each(self, request) -> None:
        for listener in list(self.before_each_listeners):
            listener(request)

    def report(self, exc: Exception) -> None:
        if self.report_callback is not None:
            self.report_callback(exc)

    def render(self, request, exc: Exception):
        """Return the custom response for `exc`, or None to use the default rendering."""
        if self.render_callback is None:
            return None
        return self.render_callback(request, exc)
