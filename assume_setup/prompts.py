"""
Interactive prompts
Returning None means the user gave no answer and the command should stop.
"""

from typing import List, Optional

import click
from rich.console import Console

console = Console(soft_wrap=True)


def ask_text(message: str) -> Optional[str]:
    try:
        value = click.prompt(message, default="", show_default=False)
    except click.Abort:
        return None
    value = value.strip()
    return value or None


def select(message: str, options: List[str]) -> Optional[str]:
    """Show options as a numbered list and return the chosen one.

    The answer may be the option's number or the option itself. Unknown
    answers ask again; an empty answer cancels.
    """
    if not options:
        return None

    for index, option in enumerate(options, start=1):
        console.print(f"  {index}) {option}", style="cyan", markup=False, highlight=False)

    while True:
        answer = ask_text(message)
        if answer is None:
            return None
        if answer in options:
            return answer
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        console.print(f"Unknown choice '{answer}', try again or press Enter to cancel",
                      style="yellow", markup=False, highlight=False)
