"""
Local Felix - terminal chat with a local Ollama model.
Adds context from local notes (RAG) and ad-hoc web searches to each turn.
"""
import asyncio
from typing import Callable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from config import Config
from services.chat_service import ChatService
from utils.constants import WELCOME_MESSAGE
from utils.http_client import HTTPClientManager
from utils.logger import app_logger

EXIT_COMMANDS = {"exit", "quit"}
CLEAR_COMMAND = "clear"
MODEL_COMMAND = "/model"


def _print_banner(console: Console, chat_service: ChatService) -> None:
    """Render the title panel and the welcome text."""
    console.print(Panel.fit(
        f"[bold cyan]{Config.APP_TITLE} - Ollama Chat Assistant[/bold cyan]\n"
        f"model={escape(chat_service.model)} host={escape(chat_service.host)} "
        f"rag={'on' if chat_service.rag_enabled else 'off'}",
        border_style="cyan"
    ))
    console.print(f"[blue]Assistant:[/blue] {escape(WELCOME_MESSAGE)}\n")


async def run_chat(
    chat_service: ChatService,
    console: Console,
    read_input: Callable[[], str] | None = None
) -> None:
    """
    Read-eval-print loop for one chat session.

    Args:
        chat_service: Session to forward messages to
        console: Rich console used for output
        read_input: Blocking line reader, defaults to the console prompt
    """
    if read_input is None:
        read_input = lambda: console.input("[bold green]You[/bold green]: ")

    _print_banner(console, chat_service)

    while True:
        try:
            raw_input = await asyncio.to_thread(read_input)
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        user_input = raw_input.strip()
        if not user_input:
            continue

        command = user_input.lower()
        if command in EXIT_COMMANDS:
            break

        if command == CLEAR_COMMAND:
            chat_service.clear_history()
            console.print("[blue]Assistant:[/blue] Conversation history cleared.\n")
            continue

        if command.startswith(f"{MODEL_COMMAND} "):
            model = user_input[len(MODEL_COMMAND):].strip()
            chat_service.set_model(model)
            console.print(f"[blue]Assistant:[/blue] Switched to model {escape(model)}.\n")
            continue

        with console.status("[yellow]Thinking...[/yellow]"):
            response = await chat_service.send_message(user_input)

        console.print(f"[blue]Assistant:[/blue] {escape(response)}\n")


async def _main() -> None:
    console = Console()
    chat_service = ChatService()
    try:
        await run_chat(chat_service, console)
    finally:
        await HTTPClientManager.close_all()
        app_logger.info("session:end")


def main() -> None:
    """Console entry point."""
    asyncio.run(_main())


if __name__ == "__main__":
    main()
