"""Interactive prompts.

kube-provision is non-interactive apart from two prompts: choosing a
kubeconfig context with ``--select`` and confirming a provisioning run
unless ``--yes`` was given.
"""

import click
import questionary
from questionary import Style

from kube_provision import console

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#5fafff bold"),
        ("question", "bold"),
        ("answer", "fg:#87d787 bold"),
        ("pointer", "fg:#87d787 bold"),
        ("highlighted", "fg:#1c1c1c bg:#87d787 bold"),
        ("instruction", "fg:#6c6c6c italic"),
        ("text", ""),
    ]
)

POINTER = "❯ "
QMARK = "? "


def confirm_action(message: str = "Continue?", *, assume_yes: bool = False) -> bool:
    """Ask the user to confirm a generative or destructive action.

    Args:
        message: The question to ask.
        assume_yes: Skip the prompt and confirm straight away.

    Returns:
        True if the action should go ahead.

    """
    if assume_yes:
        return True
    confirmed: bool | None = questionary.confirm(
        message,
        default=True,
        style=PROMPT_STYLE,
        qmark=QMARK,
    ).ask()
    return bool(confirmed)


def select_context(context_names: list[str]) -> str:
    """Prompt for the kubeconfig context to work with.

    Raises:
        click.Abort: If the user cancels the selection.

    """
    context: str | None = questionary.select(
        "Select context to work with",
        choices=context_names,
        style=PROMPT_STYLE,
        pointer=POINTER,
        qmark=QMARK,
    ).ask()
    if context is None:
        console.warning("Context selection cancelled.")
        raise click.Abort()
    return context
