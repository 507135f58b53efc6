from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from sheetline.config.config import load_config
from sheetline.editor.controller import EditorController
from sheetline.editor.service import TimelineService
from sheetline.store.models import ITEM_FIELDS, ROW_FIELD
from sheetline.timeline.markup import FIELD_LABELS
from sheetline.utils.logging_setup import configure_logging

HELP_TEXT = (
    "[bold]/list[/]              show the timeline\n"
    "[bold]/add[/]               add a new item\n"
    "[bold]/edit <row>[/]        edit the item at a sheet row\n"
    "[bold]/delete <row>[/]      delete the item at a sheet row\n"
    "[bold]/reload[/]            fetch the sheet again\n"
    "[bold]/width <px>[/]        set the viewport width used for positions\n"
    "[bold]exit[/] | [bold]quit[/]        leave"
)


def build_table(controller: EditorController) -> Table:
    view = controller.view
    title = "Timeline"
    if view is not None:
        title += f" [{view.bounds.min_year} - {view.bounds.max_year}]"
        if view.source == "sample":
            title += " (sample data)"
    table = Table(title=title)
    table.add_column("Row", justify="right")
    table.add_column("x (px)", justify="right")
    table.add_column("y (rem)", justify="right")
    table.add_column("Year")
    table.add_column("Item")
    table.add_column("Nation")
    table.add_column("Category")
    table.add_column("Info")
    for desc in controller.descriptors():
        table.add_row(
            str(desc.row), f"{desc.x:.1f}", str(desc.y), desc.year_label, desc.title,
            desc.nation, desc.category, desc.description,
        )
    return table


def prompt_form(console: Console, controller: EditorController) -> dict:
    console.print(Panel.fit(f"[bold cyan]{controller.title}[/]", border_style="cyan"))
    form = dict(controller.form)
    for name in ITEM_FIELDS:
        form[name] = Prompt.ask(FIELD_LABELS[name], default=form.get(name, ""), console=console)
    return form


def run_cli(config=None) -> None:
    config = config or load_config()
    configure_logging(log_file=config["log_file"], level=config["log_level"])

    console = Console()
    controller = EditorController(
        TimelineService.from_config(config),
        viewport_width=config["viewport_width"],
        alert=lambda message: console.print(f"[bold red]{message}[/]"),
        confirm=lambda message: Confirm.ask(message, console=console),
    )

    console.print(Panel.fit(
        "[bold cyan]Sheetline Timeline Editor[/bold cyan]\n"
        "[dim]Type /help for commands. Type 'exit' or 'quit' to stop.[/dim]",
        border_style="cyan"
    ))
    with console.status("Loading..."):
        controller.reload()
    console.print(build_table(controller))

    while True:
        try:
            line = console.input("[bold green]>>> [/]").strip()
        except (KeyboardInterrupt, EOFError):
            break

        if line.lower() in ("exit", "quit"):
            break
        if not line:
            continue

        parts = line.split()
        cmd = parts[0].lower()
        args = parts[1:]

        if cmd == "/help":
            console.print(Panel(HELP_TEXT, title="Commands", border_style="cyan"))
        elif cmd == "/list":
            console.print(build_table(controller))
        elif cmd == "/reload":
            with console.status("Loading..."):
                controller.reload()
            console.print(build_table(controller))
        elif cmd == "/width":
            try:
                width = float(args[0])
                if width <= 0:
                    raise ValueError(width)
            except (IndexError, ValueError):
                console.print("[red]invalid /width arg, expected a positive number[/]")
                continue
            controller.viewport_width = width
            console.print(build_table(controller))
        elif cmd in ("/add", "/edit"):
            if cmd == "/add":
                controller.open(None)
            else:
                try:
                    controller.open_row(int(args[0]))
                except (IndexError, ValueError):
                    console.print("[red]invalid /edit arg, expected a row number[/]")
                    continue
                except KeyError as e:
                    console.print(f"[red]{e.args[0]}[/]")
                    continue
            form = prompt_form(console, controller)
            if not Confirm.ask("Save?", default=True, console=console):
                controller.close()
                continue
            with console.status("Saving..."):
                ok = controller.submit(form)
            if ok:
                action = "Updated" if form.get(ROW_FIELD) else "Created"
                console.print(f"[green]{action} item[/]")
                console.print(build_table(controller))
        elif cmd == "/delete":
            try:
                row = int(args[0])
            except (IndexError, ValueError):
                console.print("[red]invalid /delete arg, expected a row number[/]")
                continue
            if controller.delete(row):
                console.print(f"[green]Deleted row {row}[/]")
                console.print(build_table(controller))
        else:
            console.print("[red]unknown command, use /help[/]")


def main() -> None:
    run_cli()


if __name__ == "__main__":
    main()
