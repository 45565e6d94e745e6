#!/usr/bin/env python3
"""Interactive desk-staff console for the hospital queue kiosk."""

import shlex
import sys

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table


class KioskCLI:
    """Interactive terminal front-end for the kiosk backend."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        client: httpx.Client | None = None,
        console: Console | None = None,
    ):
        """Initialize kiosk CLI."""
        self.base_url = base_url
        self.console = console or Console()
        self.client = client or httpx.Client(base_url=base_url, timeout=15.0)

    def start(self) -> None:
        """Start the interactive session."""
        self.console.print(
            Panel.fit(
                "[bold blue]🏥 Hospital Queue Kiosk - Desk Console[/bold blue]\n"
                "Issue tokens, review the queue, and undo mistakes.\n"
                "Type /help for commands, /quit to leave",
                border_style="blue",
            )
        )

        if not self.check_connection():
            self.console.print(f"[red]❌ Cannot reach the kiosk backend at {self.base_url}.[/red]")
            return

        self.console.print("[green]✅ Connected to kiosk backend[/green]")

        try:
            while True:
                line = Prompt.ask("\n[bold cyan]kiosk[/bold cyan]")
                if line.strip().lower() in ["/quit", "/exit", "quit", "exit"]:
                    break
                if line.strip():
                    self.run_command(line)
        except KeyboardInterrupt:
            pass
        finally:
            self.console.print("\n[yellow]👋 Goodbye![/yellow]")
            self.client.close()

    def run_command(self, line: str) -> None:
        """Dispatch one console command."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.console.print(f"[red]❌ {e}[/red]")
            return

        command, args = parts[0].lower(), parts[1:]
        handlers = {
            "/add": self.add_patient,
            "/list": self.show_queue,
            "/delete": self.delete_patient,
            "/undo": self.undo,
            "/aadhar": self.fetch_aadhaar,
            "/sync": self.sync,
            "/status": self.show_status,
            "/help": self.show_help,
        }
        handler = handlers.get(command)
        if handler is None:
            self.console.print(f"[red]Unknown command {command}. Type /help.[/red]")
            return

        try:
            handler(*args)
        except TypeError:
            self.console.print(f"[red]Wrong arguments for {command}. Type /help.[/red]")
        except httpx.HTTPError as e:
            self.console.print(f"[red]❌ Connection error: {e}[/red]")

    def check_connection(self) -> bool:
        try:
            response = self.client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def add_patient(self, name: str, age: str) -> None:
        response = self.client.post("/api/add-patient", json={"name": name, "age": age})
        data = response.json()
        if response.status_code != 200:
            self.console.print(f"[red]❌ {data.get('message', response.text)}[/red]")
            return

        style = "green" if data["storage"] == "store" else "yellow"
        note = "" if data["storage"] == "store" else "\n[dim]Saved offline; run /sync once the database is back[/dim]"
        self.console.print(
            Panel(
                f"[bold]{data['token']}[/bold]\n{data['name']}, {data['age']}{note}",
                title=f"[bold {style}]🎫 Token issued[/bold {style}]",
                border_style=style,
            )
        )

    def show_queue(self) -> None:
        data = self.client.get("/api/patients").json()
        if not data["store_available"]:
            self.console.print("[yellow]⚠ Database unavailable, queue cannot be listed[/yellow]")
            return
        if not data["patients"]:
            self.console.print("[dim]Queue is empty.[/dim]")
            return

        table = Table(title="Queue")
        table.add_column("Token", style="bold")
        table.add_column("Name")
        table.add_column("Age", justify="right")
        for patient in data["patients"]:
            table.add_row(patient["token"], patient["name"], str(patient["age"]))
        self.console.print(table)

    def delete_patient(self, token: str) -> None:
        response = self.client.delete(f"/api/patients/{token}")
        if response.status_code == 200:
            self.console.print(f"[green]Patient with token {token} deleted.[/green]")
        else:
            self.console.print(f"[red]{response.json().get('message', response.text)}[/red]")

    def undo(self) -> None:
        data = self.client.post("/api/undo").json()
        messages = {
            "UNDONE": f"[green]↩ Removed {data.get('token')}[/green]",
            "NOTHING_TO_UNDO": "[dim]No patient to undo.[/dim]",
            "REMOVED_FROM_FALLBACK": f"[green]↩ Removed offline record {data.get('token')}[/green]",
            "NOT_IN_STORE": f"[yellow]↩ {data.get('token')} was not in the database[/yellow]",
            "STORE_UNAVAILABLE": f"[red]↩ {data.get('token')} could not be removed, database unavailable[/red]",
        }
        self.console.print(messages.get(data["status"], data["status"]))

    def fetch_aadhaar(self, number: str) -> None:
        data = self.client.get(f"/api/fetch-aadhar/{number}").json()
        self.console.print(f"[bold]{data['name']}[/bold], {data['age']} ({data['token']})")

    def sync(self) -> None:
        data = self.client.post("/api/queue/sync").json()
        self.console.print(f"Synced {len(data['synced'])} record(s), {len(data['pending'])} still pending")

    def show_status(self) -> None:
        data = self.client.get("/api/queue/status").json()
        store = "[green]up[/green]" if data["store_available"] else "[red]down[/red]"
        self.console.print(f"Database {store} · undo depth {data['undo_depth']} · offline {data['fallback_size']}")

    def show_help(self) -> None:
        help_text = """
[bold]Available Commands:[/bold]
• /add NAME AGE - Issue a token (quote names with spaces)
• /list - Show the queue
• /delete TOKEN - Remove a patient by token
• /undo - Remove the most recently added patient
• /aadhar NUMBER - Look up demo identity details
• /sync - Push offline records into the database
• /status - Show database and offline state
• /quit or /exit - Leave the console
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]❓ Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the kiosk console."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8080"

    cli = KioskCLI(base_url)
    cli.start()


if __name__ == "__main__":
    main()
