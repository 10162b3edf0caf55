"""Placeholder expansion for command templates.

``$1`` .. ``$9`` are positional, ``$@`` and ``$*`` are all arguments joined
with a single space. Arguments are substituted verbatim (no quoting) in a
single pass, so a placeholder that appears inside an argument value is never
expanded again.
"""

from typing import List, Sequence
import re

from berth.errors import UnboundPlaceholderError

PLACEHOLDER_PATTERN = re.compile(r"\$([1-9@*])")


def find_placeholders(template: str) -> List[str]:
    """List the placeholders of ``template`` in order of appearance."""
    return [match.group(0) for match in PLACEHOLDER_PATTERN.finditer(template)]


def unbound_placeholders(template: str, args: Sequence[str]) -> List[str]:
    """Positional placeholders of ``template`` that ``args`` cannot fill."""
    return [
        placeholder
        for placeholder in find_placeholders(template)
        if placeholder[1].isdigit() and int(placeholder[1]) > len(args)
    ]


def expand(template: str, args: Sequence[str], strict: bool = True) -> str:
    """Substitute caller arguments into a command template.

    Args:
        template: Command template
        args: Caller-supplied arguments
        strict: Raise on a positional placeholder without an argument
            instead of leaving it in the output

    Returns:
        The expanded command string

    Raises:
        UnboundPlaceholderError: In strict mode, when ``$N`` exceeds ``len(args)``
    """
    args = list(args)
    joined = " ".join(args)

    def substitute(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token in ("@", "*"):
            return joined

        index = int(token) - 1
        if index < len(args):
            return args[index]
        if strict:
            raise UnboundPlaceholderError(match.group(0), template, len(args))
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(substitute, template)
