"""
Failure reports produced while walking a schema, and their assembly into
a ValidationError.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .api import ErrorDetail, ValidationError
from .utils import KeyPath

logger = logging.getLogger("fluent_schema")


class Report:
    """
    A single failure signal.

    Composite failures (an object child or an array item that failed) carry
    the nested reports in ``context["reason"]``; only reports without a
    reason become ErrorDetails.
    """

    def __init__(self,
                 type_: str,
                 context: Optional[Dict[str, Any]],
                 state: Any,
                 options: Any,
                 flags: Optional[Dict[str, Any]] = None,
                 template: Optional[str] = None):
        """
        Initialize a new report.

        Args:
            type_: Message key (e.g. ``number.min``)
            context: Values for interpolation
            state: Validation state locating the failing value
            options: Options in effect, providing the message catalog
            flags: Flags of the failing node (for its label)
            template: Template overriding the catalog entry
        """
        self.type = type_
        self.path = tuple(state.path)
        self.options = options
        self.flags = flags or {}
        self.template = template
        self.context = dict(context or {})
        self.context["key"] = str(state.key) if state.key is not None else options.catalog.root
        if self.flags.get("label") is not None:
            self.context["label"] = self.flags["label"]

    @property
    def reason(self) -> Sequence[Any]:
        return self.context.get("reason") or ()

    def render(self) -> str:
        """Render the message for this report using its catalog."""
        catalog = self.options.catalog
        template = self.template if self.template is not None else catalog.template(self.type)
        if template is None:
            template = self.type
        context = dict(self.context)
        if "label" in context:
            context["key"] = context["label"]
        return catalog.format(template, context)

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail.create(self.render(), self.path, self.type, dict(self.context))

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Report(type={self.type!r}, path={KeyPath.from_parts(self.path)!r})"


def process_reports(reports: Optional[List[Any]], original: Any) -> Optional[BaseException]:
    """
    Turn the reports of one validation call into an error.

    Top-level report messages are joined with ``". "`` to form the error
    message; leaf reports become details in discovery order. A
    caller-supplied exception found among the reports is returned instead.

    Args:
        reports: Reports returned by the root schema, or None
        original: The input as passed to validate

    Returns:
        ValidationError, a caller-supplied exception, or None when there were
        no reports
    """
    if not reports:
        return None

    messages: List[str] = []
    details: List[ErrorDetail] = []

    def walk(items: Sequence[Any], top: bool) -> Optional[BaseException]:
        for item in items:
            if isinstance(item, BaseException):
                return item
            if top:
                messages.append(item.render())
            if item.reason:
                override = walk(item.reason, False)
                if override is not None:
                    return override
            else:
                details.append(item.to_detail())
        return None

    override = walk(reports, True)
    if override is not None:
        logger.debug(f"Validation failed with caller-supplied error {override!r}")
        return override

    return ValidationError(". ".join(messages), details, original)
