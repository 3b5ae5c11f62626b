from rich.console import Console as _Console
from rich.panel import Panel
from rich.table import Table

_console = _Console(highlight=False)

_STYLES = {"info": "blue", "success": "green", "warn": "red"}


def _emit(level: str, text: str, important: bool, values: dict):
    color = _STYLES[level]
    if values:
        text = text.format(**{
            k: f"[bold {color}]{v}[/bold {color}]" for k, v in values.items()
        })
    if important:
        _console.print(Panel(text, expand=False, border_style=color))
    else:
        _console.print(text, style="dim" if level == "info" else f"dim {color}")


class Console:
    @staticmethod
    def info(text: str, *, important=False, **kwargs):
        _emit("info", text, important, kwargs)

    @staticmethod
    def success(text: str, *, important=False, **kwargs):
        _emit("success", text, important, kwargs)

    @staticmethod
    def warn(text: str, *, important=False, **kwargs):
        _emit("warn", text, important, kwargs)

    @staticmethod
    def fields(pairs: dict[str, object]):
        """Aligned ``key: value`` lines, skipping empty values."""
        width = max(map(len, pairs), default=0)
        for key, value in pairs.items():
            if value in ("", None):
                continue
            _console.print(f"[bold]{key.ljust(width)}[/bold]  {value}")

    @staticmethod
    def table(title: str, columns: list[str], rows: list[list[str]]):
        table = Table(title=title, title_justify="left", header_style="bold blue")
        for i, column in enumerate(columns):
            table.add_column(column, justify="left" if i == 0 else "right")
        for row in rows:
            table.add_row(*row)
        _console.print(table)
