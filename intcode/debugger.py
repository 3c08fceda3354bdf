"""
Textual TUI debugger for the Intcode machine.

Instruction-stepping debugger that loads a program file, runs it on the
machine, and displays full machine state at every step.

Usage:
    python -m intcode.debugger examples/compare_to_8.intcode -i 7
    python -m intcode.debugger --run examples/amplifier_stage.intcode -i 4 -i 0
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.widgets import Static, RichLog, Footer
from textual import work
from textual.worker import Worker, get_current_worker

from intcode.decoder import disassemble
from intcode.machine import STATE_NAMES
from intcode.program_runner import ProgramRunner

MEMORY_ROW = 8
DISASM_WINDOW = 40


def _esc(text: str) -> str:
    """Escape Rich markup characters in text."""
    return text.replace("[", "\\[")


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

DEBUGGER_CSS = """
Screen {
    layout: grid;
    grid-size: 2 4;
    grid-columns: 1fr 1fr;
    grid-rows: 1fr 1fr 1fr auto;
}

.panel {
    border: solid $accent;
    border-title-align: left;
    overflow-y: auto;
    height: 100%;
}

#disasm-panel { row-span: 2; }

Footer {
    column-span: 2;
}
"""


# ---------------------------------------------------------------------------
# Panel widgets
# ---------------------------------------------------------------------------

class DisassemblyPanel(ScrollableContainer):
    """Decoded instructions around the program counter."""
    BORDER_TITLE = "Program"

    def compose(self) -> ComposeResult:
        yield Static("", id="disasm-content")


class StatePanel(ScrollableContainer):
    """Machine state: counter, counters, last operation."""
    BORDER_TITLE = "Machine State"

    def compose(self) -> ComposeResult:
        yield Static("", id="state-content")


class MemoryPanel(ScrollableContainer):
    """Raw memory words, one row per MEMORY_ROW slots."""
    BORDER_TITLE = "Memory"

    def compose(self) -> ComposeResult:
        yield Static("", id="memory-content")


class IOPanel(ScrollableContainer):
    """Input and output queue contents."""
    BORDER_TITLE = "IO"

    def compose(self) -> ComposeResult:
        yield Static("", id="io-content")


class OutputPanel(ScrollableContainer):
    """Emitted values and run events."""
    BORDER_TITLE = "Output"

    def compose(self) -> ComposeResult:
        yield RichLog(id="output-log", markup=True, wrap=True)


# ---------------------------------------------------------------------------
# Main debugger app
# ---------------------------------------------------------------------------

class IntcodeDebugger(App):
    """Textual TUI debugger for the Intcode machine."""

    CSS = DEBUGGER_CSS
    TITLE = "Intcode Debugger"

    BINDINGS = [
        Binding("s", "step_1", "Step"),
        Binding("space", "step_1", "Step", show=False),
        Binding("n", "step_10", "x10"),
        Binding("f", "step_100", "x100"),
        Binding("r", "run_to_end", "Run"),
        Binding("b", "toggle_breakpoint", "Break"),
        Binding("o", "run_to_output", "→Output"),
        Binding("x", "stop", "Stop"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, runner: ProgramRunner, auto_run: bool = False):
        super().__init__()
        self.runner = runner
        self.auto_run = auto_run
        self.breakpoints: set[int] = set()
        self._output_line_count = 0
        self._running_worker: Worker | None = None

    def compose(self) -> ComposeResult:
        yield DisassemblyPanel(id="disasm-panel", classes="panel")
        yield StatePanel(id="state-panel", classes="panel")
        yield IOPanel(id="io-panel", classes="panel")
        yield MemoryPanel(id="memory-panel", classes="panel")
        yield OutputPanel(id="output-panel", classes="panel")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_panels()
        if self.auto_run:
            self.action_run_to_end()

    # -------------------------------------------------------------------
    # Panel refresh
    # -------------------------------------------------------------------

    def refresh_panels(self) -> None:
        self._refresh_disasm()
        self._refresh_state()
        self._refresh_memory()
        self._refresh_io()
        self._refresh_output()

    def _refresh_disasm(self) -> None:
        m = self.runner.machine
        lines = []
        if m is not None:
            # Re-align at the program counter when a jump lands mid-instruction.
            start = max(0, m.pc - 12)
            listing = list(disassemble(m.memory.data, 0))
            if not any(addr == m.pc for addr, _ in listing):
                listing = [(addr, text) for addr, text in listing if addr < m.pc]
                listing += disassemble(m.memory.data, m.pc)
            for addr, text in listing:
                if addr < start:
                    continue
                prefix = "●" if addr in self.breakpoints else " "
                marker = "▸" if addr == m.pc and not self.runner.finished else " "
                line = f"{prefix}{marker} {addr:4d}│ {_esc(text)}"
                if marker == "▸":
                    line = f"[bold reverse]{line}[/bold reverse]"
                lines.append(line)
                if len(lines) >= DISASM_WINDOW:
                    break

        content = self.query_one("#disasm-content", Static)
        content.update("\n".join(lines) if lines else "(no program loaded)")

    def _refresh_state(self) -> None:
        m = self.runner.machine
        if m is None:
            text = "(no program loaded)"
        else:
            last = m.last_operation.MNEMONIC if m.last_operation else "-"
            error = _esc(str(self.runner.error)) if self.runner.error else "-"
            text = (
                f"[bold]State:[/bold] {STATE_NAMES.get(m.state, '?')}    "
                f"[bold]Phase:[/bold] {self.runner.phase}\n"
                f"[bold]PC:[/bold] {m.pc}    [bold]Cycle:[/bold] {m.cycles}\n"
                f"[bold]Next:[/bold] {_esc(self.runner.current_text()) or '-'}\n"
                f"[bold]Last:[/bold] {last}\n"
                f"[bold]Memory:[/bold] {len(m.memory)} words  "
                f"{m.memory.reads}R/{m.memory.writes}W\n"
                f"[bold]Error:[/bold] {error}"
            )
        content = self.query_one("#state-content", Static)
        content.update(text)

    def _refresh_memory(self) -> None:
        m = self.runner.machine
        lines = []
        if m is not None:
            data = m.memory.data
            for base in range(0, len(data), MEMORY_ROW):
                cells = []
                for addr in range(base, min(base + MEMORY_ROW, len(data))):
                    cell = f"{data[addr]:>7d}"
                    if addr == m.pc:
                        cell = f"[green]{cell}[/green]"
                    cells.append(cell)
                lines.append(f"{base:4d}: {''.join(cells)}")
        content = self.query_one("#memory-content", Static)
        content.update("\n".join(lines) if lines else "(empty)")

    def _refresh_io(self) -> None:
        m = self.runner.machine

        def fmt_queue(values: list[int]) -> str:
            if not values:
                return "(empty)"
            return " ".join(str(v) for v in values)

        if m is None:
            text = "(no program loaded)"
        else:
            text = (
                f"[bold]IN:[/bold]  {fmt_queue(m.input.to_list())}\n"
                f"[bold]OUT:[/bold] {fmt_queue(m.output.to_list())}\n"
                f"[bold]Consumed:[/bold] {m.inputs_consumed}"
            )
        content = self.query_one("#io-content", Static)
        content.update(text)

    def _refresh_output(self) -> None:
        log = self.query_one("#output-log", RichLog)
        while self._output_line_count < len(self.runner.output_lines):
            log.write(_esc(self.runner.output_lines[self._output_line_count]))
            self._output_line_count += 1

    # -------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------

    @property
    def run_active(self) -> bool:
        w = self._running_worker
        return w is not None and not w.is_finished

    def _do_steps(self, count: int) -> None:
        if self.run_active:
            return
        for _ in range(count):
            if not self.runner.tick():
                break
        self.refresh_panels()

    def action_step_1(self) -> None:
        self._do_steps(1)

    def action_step_10(self) -> None:
        self._do_steps(10)

    def action_step_100(self) -> None:
        self._do_steps(100)

    def action_toggle_breakpoint(self) -> None:
        m = self.runner.machine
        if m is None:
            return
        if m.pc in self.breakpoints:
            self.breakpoints.discard(m.pc)
        else:
            self.breakpoints.add(m.pc)
        self._refresh_disasm()

    def action_run_to_end(self) -> None:
        """Run to completion or the next breakpoint in a background thread."""
        if self.run_active or self.runner.machine is None:
            return
        self._running_worker = self._run_worker(stop_on_output=False)

    def action_run_to_output(self) -> None:
        """Run until the machine emits its next value."""
        if self.run_active or self.runner.machine is None:
            return
        self._running_worker = self._run_worker(stop_on_output=True)

    def action_stop(self) -> None:
        if self._running_worker is not None:
            self._running_worker.cancel()
        self.refresh_panels()

    @work(thread=True, exclusive=True)
    def _run_worker(self, stop_on_output: bool) -> None:
        worker = get_current_worker()
        m = self.runner.machine
        emitted = len(m.output)

        def should_stop() -> bool:
            if worker.is_cancelled or m.pc in self.breakpoints:
                return True
            return stop_on_output and len(m.output) > emitted

        while not self.runner.run(max_steps=500, should_stop=should_stop):
            if should_stop():
                break
            self.call_from_thread(self.refresh_panels)
        if not worker.is_cancelled:
            self.call_from_thread(self.refresh_panels)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(
        description="Intcode machine TUI debugger",
        prog="python -m intcode.debugger",
    )
    parser.add_argument("file", nargs="?", help="Path to a program file")
    parser.add_argument("-e", "--program", help="Program text given inline")
    parser.add_argument("-i", "--input", type=int, action="append", default=[],
                        help="Value for the input queue (repeatable)")
    parser.add_argument("--run", action="store_true",
                        help="Run to completion immediately (auto-run mode)")
    args = parser.parse_args()

    if not args.file and not args.program:
        parser.error("Provide a program file or -e program text")

    runner = ProgramRunner(inputs=args.input)

    try:
        if args.file:
            path = Path(args.file)
            if not path.exists():
                print(f"Error: File not found: {path}", file=sys.stderr)
                sys.exit(1)
            runner.load_file(path)
        else:
            runner.load_text(args.program)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    app = IntcodeDebugger(runner, auto_run=args.run)
    app.run()


if __name__ == "__main__":
    main()
