# src/cmdlang_shell/core/utils/helptext.py
from typing import Optional

from cmdlang_shell.core.command_registry import COMMAND_REGISTRY, CommandRegistry
from cmdlang_shell.model import CommandDefinition

# The static header part of the help text
HEADER_HELP_TEXT = """
🚀 cmdlang Shell - Help

---
SYNTAX
---
  cmd -a value --long value      Named arguments (short or long form).
  cmd value1 value2              Positional arguments, in declaration order.
  A ; B                          Run B after A (a newline works too).
  $x = value                     Assign a variable, read it back with $x.
  $x[key]  $x[0]                 Key / index access.
  'a' + $x                       Concatenation (numbers are added).
  $(cmd ...)                     Run a command and use its result as value.
  // comment                     Ignored until the end of the line.

---
GENERATORS (inside quoted values, e.g. print 'id-$INT[1,99]')
---
  $STR[min,max] $INT[min,max] $FLOAT[min,max] $INTSEQ[min,max]
  $INTITER[start,step] $EMAIL $URL $UUID $NOW $DATE $TIME

---
COMMANDS
---
""".strip()


def get_command_help(command: CommandDefinition) -> str:
    """Renders the signature and arguments of one command."""
    lines = [f"{command.name} - {command.definition}"]
    if command.aliases:
        lines.append(f"  Aliases: {', '.join(command.aliases)}")
    if command.detail:
        lines.append(f"  {command.detail}")
    for spec in command.args:
        names = f"-{spec.short_name}, --{spec.long_name}" if spec.short_name else f"--{spec.long_name}"
        line = f"    {names} <{spec.human_type}>"
        if spec.is_required:
            line += " (required)"
        line += f"  {spec.description}"
        if spec.default is not None:
            line += f" [default: {spec.default}]"
        if spec.strict_values:
            line += f" [values: {', '.join(spec.strict_values)}]"
        lines.append(line)
    if command.example:
        lines.append(f"  Example: {command.name} {command.example}")
    if command.help_text:
        lines.append(command.help_text)
    return "\n".join(lines)


def get_help_text(registry: Optional[CommandRegistry] = None) -> str:
    """
    Assembles the full help text from the header and every registered command.
    """
    registry = registry if registry is not None else COMMAND_REGISTRY
    full_help_parts = [HEADER_HELP_TEXT]
    for command in sorted(registry, key=lambda c: c.name):
        full_help_parts.append(f"  {command.name:<20} {command.definition}")
    return "\n".join(full_help_parts)
