"""Mode-aware command sanitization.

The sanitizer wraps the pattern catalog with a policy. A command goes through
three stages, always in this order:

1. ``template``  - the raw, unexpanded command template
2. ``arguments`` - each caller argument on its own
3. ``expanded``  - the template after placeholder expansion

Which stages run and what they accept depends on the mode:

========  ==========  ==========  ==========
Mode      Template    Arguments   Expanded
========  ==========  ==========  ==========
disabled  skipped     skipped     skipped
warn      logged      logged      logged
strict    enforced    enforced    enforced
script    exempt      enforced    new constructs only
========  ==========  ==========  ==========

Warn mode never blocks: a dangerous command still runs after the warning is
logged. Operators opting into it accept that trade-off.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from loguru import logger
from rich.console import Console

from berth.errors import SANITIZE_MODE_ENV, ValidationError

from .expander import expand, unbound_placeholders
from .patterns import PatternMatch, count_patterns, find_dangerous_patterns, first_dangerous_pattern


class SanitizationMode(str, Enum):
    """How strictly the dangerous-pattern catalog is enforced."""

    DISABLED = "disabled"
    WARN = "warn"
    STRICT = "strict"
    SCRIPT = "script"


class ValidationStage(str, Enum):
    """Pipeline stage that raised a validation error."""

    TEMPLATE = "template"
    ARGUMENTS = "arguments"
    EXPANDED = "expanded"


def parse_sanitize_mode(value: Optional[str]) -> Tuple[SanitizationMode, bool]:
    """Parse a mode name.

    Returns:
        ``(mode, recognized)``; unknown names fall back to strict with
        ``recognized`` set to False so the caller can warn.
    """
    normalized = (value or "").strip().lower()
    if normalized in ("disabled", "off"):
        return SanitizationMode.DISABLED, True
    if normalized == "warn":
        return SanitizationMode.WARN, True
    if normalized in ("strict", ""):
        return SanitizationMode.STRICT, True
    if normalized == "script":
        return SanitizationMode.SCRIPT, True
    return SanitizationMode.STRICT, False


def warn_unknown_mode(value: str, console: Optional[Console] = None) -> None:
    """Tell the user an unrecognized mode was replaced by strict."""
    console = console or Console(stderr=True)
    console.print(
        f"Warning: Unknown {SANITIZE_MODE_ENV} '{value}', using 'strict'",
        style="yellow",
        markup=False,
        highlight=False,
    )


@dataclass(frozen=True)
class SanitizerConfig:
    """Sanitizer settings, fixed for the lifetime of a run.

    Built from the environment by ``BerthSettings.sanitizer_config``.
    """

    mode: SanitizationMode = SanitizationMode.STRICT
    allow_pipes: bool = False
    allow_redirects: bool = False


class CommandSanitizer:
    """Validates command templates and arguments against the pattern catalog."""

    def __init__(self, config: Optional[SanitizerConfig] = None):
        """Initialize sanitizer.

        Args:
            config: Sanitizer configuration, strict by default
        """
        self.config = config or SanitizerConfig()

    @property
    def mode(self) -> SanitizationMode:
        """Active sanitization mode."""
        return self.config.mode

    @property
    def enabled(self) -> bool:
        return self.config.mode is not SanitizationMode.DISABLED

    def _first(self, text: str) -> Optional[PatternMatch]:
        return first_dangerous_pattern(
            text,
            allow_pipes=self.config.allow_pipes,
            allow_redirects=self.config.allow_redirects,
        )

    def _report(
        self,
        stage: ValidationStage,
        match: PatternMatch,
        target: str,
        expanded: Optional[str] = None,
    ) -> None:
        """Raise the finding, or log it in warn mode."""
        if self.config.mode is SanitizationMode.WARN:
            logger.bind(notice=True).warning(
                f"Unsafe command allowed by warn mode ({stage.value} stage): "
                f"{match.category.value} detected in {target}: {match.fragment!r}"
            )
            return
        raise ValidationError.dangerous_pattern(
            stage.value,
            match.category.value,
            match.fragment,
            target,
            description=match.description,
            expanded=expanded,
        )

    def validate(
        self,
        command: str,
        args: Sequence[str] = (),
        stage: ValidationStage = ValidationStage.TEMPLATE,
    ) -> None:
        """Validate a command string and its arguments.

        ``command`` is checked under the rule of ``stage``; every argument is
        checked under the arguments rule.

        Raises:
            ValidationError: On the first dangerous construct (strict/script)
        """
        if not self.enabled:
            return

        if command:
            if stage is ValidationStage.TEMPLATE:
                self.validate_template(command)
            else:
                self._check(stage, command, "command")

        if args:
            self.validate_arguments(args)

    def _check(
        self,
        stage: ValidationStage,
        text: str,
        target: str,
        expanded: Optional[str] = None,
    ) -> None:
        match = self._first(text)
        if match is not None:
            self._report(stage, match, target, expanded)

    def validate_template(self, template: str) -> None:
        """Stage 1: the raw command template."""
        if not self.enabled or self.config.mode is SanitizationMode.SCRIPT:
            return
        self._check(ValidationStage.TEMPLATE, template, "command")

    def validate_arguments(self, args: Sequence[str]) -> None:
        """Stage 2: each caller argument independently.

        Enforced in every enabled mode, script mode included.
        """
        if not self.enabled:
            return
        for index, arg in enumerate(args, start=1):
            self._check(ValidationStage.ARGUMENTS, arg, f"argument {index}")

    def validate_expanded(self, expanded: str, template: Optional[str] = None) -> None:
        """Stage 3: the fully substituted command.

        In script mode only constructs that substitution introduced are
        rejected, i.e. pattern occurrences the expansion has more of than the
        template.
        """
        if not self.enabled:
            return

        if self.config.mode is not SanitizationMode.SCRIPT or template is None:
            self._check(ValidationStage.EXPANDED, expanded, "expanded command", expanded)
            return

        allowed = count_patterns(
            template,
            allow_pipes=self.config.allow_pipes,
            allow_redirects=self.config.allow_redirects,
        )
        seen = dict.fromkeys(allowed, 0)
        for match in find_dangerous_patterns(
            expanded,
            allow_pipes=self.config.allow_pipes,
            allow_redirects=self.config.allow_redirects,
        ):
            key = (match.category, match.fragment)
            seen[key] = seen.get(key, 0) + 1
            if seen[key] > allowed.get(key, 0):
                self._report(ValidationStage.EXPANDED, match, "expanded command", expanded)
                return

    def check(self, template: str, args: Sequence[str] = ()) -> str:
        """Run the full pipeline and return the expanded command.

        Unbound placeholders fail fast in strict and script mode. Warn mode
        logs them and disabled mode leaves them in place.

        Raises:
            ValidationError: From whichever stage fails first
            UnboundPlaceholderError: When the template needs more arguments
        """
        args = list(args)
        self.validate(template, [])
        self.validate("", args)

        blocking = self.config.mode in (SanitizationMode.STRICT, SanitizationMode.SCRIPT)
        if self.config.mode is SanitizationMode.WARN:
            for placeholder in unbound_placeholders(template, args):
                logger.bind(notice=True).warning(f"Unbound placeholder {placeholder} left in command")
        expanded = expand(template, args, strict=blocking)

        self.validate_expanded(expanded, template)
        return expanded
