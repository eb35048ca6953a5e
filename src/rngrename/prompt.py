"""Interactive prompts shown when an error occurs or a batch needs confirming."""

from enum import Enum
from typing import Optional

from rich.console import Console
from rich.prompt import Prompt

console = Console(highlight=False)


class UserHaltError(Exception):
    """Raised when the user chooses to halt at a prompt."""

    def __init__(self):
        super().__init__("user halt")


class ErrorHandlingMode(Enum):
    IGNORE = "ignore"
    WARN = "warn"
    HALT = "halt"


class OnErrorResponse(Enum):
    SKIP = "skip"
    RETRY = "retry"
    HALT = "halt"


class BatchConfirmResponse(Enum):
    PROCEED = "proceed"
    SKIP = "skip"
    HALT = "halt"


def _parse_response(answer: str, response_type):
    """Match a full word or its first letter against an enum's values."""
    answer = answer.strip().lower()
    for response in response_type:
        if answer in (response.value, response.value[0]):
            return response
    return None


def _ask(prompt_text: str, response_type, default):
    while True:
        answer = Prompt.ask(prompt_text, console=console, default=default.value)
        response = _parse_response(answer, response_type)
        if response is not None:
            return response
        console.print(f'[red]"{answer}" is not a valid response[/red]')


def error_prompt(
    question: str, default: Optional[OnErrorResponse] = OnErrorResponse.SKIP
) -> OnErrorResponse:
    """Ask the user whether to skip, retry or halt after an error.

    Args:
        question: The question to show
        default: Response used when the user just presses enter

    Returns:
        The user's response
    """
    prompt_text = (
        f"\t{question} You can [green]skip[/green]([green]s[/green]), "
        "[green]retry[/green]([green]r[/green]), "
        "or [green]halt[/green]([green]h[/green])"
    )
    return _ask(prompt_text, OnErrorResponse, default or OnErrorResponse.SKIP)


def batch_prompt() -> BatchConfirmResponse:
    """Ask the user whether to proceed with, skip or halt at a batch."""
    prompt_text = (
        "Confirm batch? You can [green]proceed[/green]([green]p[/green]), "
        "[green]skip[/green]([green]s[/green]), "
        "or [green]halt[/green]([green]h[/green])"
    )
    return _ask(prompt_text, BatchConfirmResponse, BatchConfirmResponse.PROCEED)


def handle_error(
    err_mode: ErrorHandlingMode, message: str, question: str
) -> Optional[OnErrorResponse]:
    """Decide what to do about a per-item error according to the mode.

    Returns SKIP for ignore mode, the user's answer for warn mode, and None
    for halt mode, where the caller is expected to raise.

    Raises:
        UserHaltError: If the user chooses to halt
    """
    if err_mode is ErrorHandlingMode.IGNORE:
        return OnErrorResponse.SKIP
    if err_mode is ErrorHandlingMode.HALT:
        return None

    console.print(message)
    response = error_prompt(question)
    if response is OnErrorResponse.HALT:
        raise UserHaltError()
    return response
