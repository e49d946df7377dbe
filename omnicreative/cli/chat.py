"""
CLI Chat Commands - terminal front end for the generation controller.

Provides an interactive REPL (`chat`) and a one-shot `generate` command.
Both drive the same ConversationStore / GenerationController pair the
Streamlit dashboard uses.
"""

import asyncio
import mimetypes
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt

from ..core.models import ContentType, GenerationMode, MediaAttachment, Message, ProjectContext, Role
from ..services import Capabilities, Composer, ConversationStore, GenerationController

MODE_CHOICES = [m.value for m in GenerationMode]


def load_attachment(path: str) -> MediaAttachment:
    """Read a local file into a MediaAttachment."""
    file_path = Path(path)
    mime_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
    return MediaAttachment.from_bytes(file_path.read_bytes(), mime_type=mime_type, name=file_path.name)


def build_controller(store: ConversationStore) -> GenerationController:
    return GenerationController(store, Capabilities.create())


def render_message(console: Console, message: Message):
    """Print one transcript entry."""
    if message.role == Role.USER:
        console.print(f"\n[bold green]You[/bold green]: {message.content}")
        return

    if message.type == ContentType.IMAGE:
        body = f"{message.content}\n\n🖼️  Image ready ({len(message.metadata.image_url)} chars data URI)"
    elif message.type == ContentType.VIDEO:
        body = f"{message.content}\n\n🎬 Saved to: {message.metadata.video_url}"
    else:
        body = message.content
        if message.type == ContentType.RESEARCH and message.metadata.sources:
            body += "\n\n**Sources**\n" + "\n".join(
                f"- [{s.label}]({s.uri})" for s in message.metadata.sources
            )

    console.print(Panel(Markdown(body), title="OmniCreative", border_style="cyan"))


def context_options(func):
    """Shared project-context options."""
    defaults = ProjectContext()
    func = click.option('--tone', default=defaults.tone, help='Brand tone & voice')(func)
    func = click.option('--industry', default=defaults.industry, help='Industry')(func)
    func = click.option('--brand', default=defaults.brand_name, help='Brand name')(func)
    return func


@click.command()
@click.option(
    '--mode',
    type=click.Choice(MODE_CHOICES),
    default=GenerationMode.COPYWRITING.value,
    help='Starting generation mode (default: copywriting)'
)
@context_options
def chat(mode: str, brand: str, industry: str, tone: str):
    """
    Interactive chat with the creative director.

    Examples:
        omnicreative chat
        omnicreative chat --mode research
        omnicreative chat --brand Acme --tone "Playful, bold"
    """
    context = ProjectContext(brand_name=brand, industry=industry, tone=tone)
    asyncio.run(run_chat_loop(GenerationMode(mode), context))


async def run_chat_loop(mode: GenerationMode, context: ProjectContext):
    """
    Main chat loop - reads input, handles commands, runs lifecycles.

    Args:
        mode: Starting generation mode
        context: Project context for copywriting
    """
    console = Console()
    store = ConversationStore.with_welcome()
    composer = Composer()

    try:
        controller = build_controller(store)
    except Exception as e:
        console.print(f"[red]Error initializing services: {e}[/red]")
        console.print("[yellow]Make sure GEMINI_API_KEY is set.[/yellow]")
        return

    render_message(console, store.messages[0])
    console.print(f"[cyan]Mode: {mode.label}[/cyan]  (type 'help' for commands, 'quit' to exit)")

    while True:
        try:
            user_input = Prompt.ask("\n[bold green]You[/bold green]")
        except (KeyboardInterrupt, EOFError):
            console.print("\n[yellow]Goodbye![/yellow]")
            break

        command = user_input.strip()

        if command.lower() in ['quit', 'exit', 'q']:
            console.print("[yellow]Goodbye![/yellow]")
            break

        if command.lower() in ['help', '?']:
            show_help(console)
            continue

        if command.lower() in ['clear', 'reset']:
            store.clear()
            console.clear()
            console.print("[cyan]Conversation cleared.[/cyan]")
            continue

        if command.startswith('/mode'):
            name = command[len('/mode'):].strip()
            if name not in MODE_CHOICES:
                console.print(f"[red]Unknown mode. Choose one of: {', '.join(MODE_CHOICES)}[/red]")
                continue
            mode = GenerationMode(name)
            console.print(f"[cyan]Mode: {mode.label}[/cyan]")
            continue

        if command.startswith('/attach'):
            path = command[len('/attach'):].strip()
            try:
                composer.attachment = load_attachment(path)
            except (OSError, ValueError) as e:
                console.print(f"[red]Could not attach {path}: {e}[/red]")
                continue
            console.print(f"[cyan]📎 Attached: {composer.attachment.display_name}[/cyan]")
            continue

        if command == '/context':
            console.print(f"[cyan]{context.to_prompt_context()}[/cyan]")
            continue

        composer.text = user_input
        seen = len(store)

        with console.status(f"[cyan]{mode.working_status}[/cyan]"):
            accepted = await controller.submit_from(composer, mode=mode, context=context)

        if not accepted:
            continue

        # Skip the echoed user turn; print the terminal record
        for message in store.messages[seen:]:
            if message.role != Role.USER:
                render_message(console, message)


@click.command()
@click.argument('prompt', default='')
@click.option(
    '--mode',
    type=click.Choice(MODE_CHOICES),
    default=GenerationMode.COPYWRITING.value,
    help='Generation mode (default: copywriting)'
)
@click.option('--attach', 'attach_path', type=click.Path(exists=True, dir_okay=False), help='File to attach')
@context_options
def generate(prompt: str, mode: str, attach_path: Optional[str], brand: str, industry: str, tone: str):
    """
    Run a single generation and print the result.

    Examples:
        omnicreative generate "Write a tagline for LuxNova"
        omnicreative generate "neon skyline" --mode visual --attach ref.png
    """
    console = Console()
    context = ProjectContext(brand_name=brand, industry=industry, tone=tone)
    attachment = load_attachment(attach_path) if attach_path else None

    store = ConversationStore()
    try:
        controller = build_controller(store)
    except Exception as e:
        console.print(f"[red]Error initializing services: {e}[/red]")
        raise SystemExit(1)

    with console.status(f"[cyan]{GenerationMode(mode).working_status}[/cyan]"):
        accepted = asyncio.run(controller.submit(prompt, attachment, mode=GenerationMode(mode), context=context))

    if not accepted:
        console.print("[yellow]Nothing to generate: provide a prompt or --attach a file.[/yellow]")
        raise SystemExit(2)

    render_message(console, store.messages[-1])


def show_help(console: Console):
    """Display help information."""
    help_text = f"""
**Available Commands:**

- `/mode <name>` - Switch tool ({', '.join(MODE_CHOICES)})
- `/attach <path>` - Attach a file to the next message
- `/context` - Show the project context
- `help` or `?` - Show this help message
- `clear` or `reset` - Clear the conversation
- `quit`, `exit`, or `q` - Exit the chat

**Tips:**

- Copywriting uses the brand, industry and tone you started with
- Visuals treat an attached image as a style reference
- Video renders take a minute or more; clips are saved locally
    """
    console.print(Panel(
        Markdown(help_text),
        title="Help",
        border_style="yellow"
    ))
