import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.logging import TextualHandler
from textual.widgets import Button, Digits, Footer, Header, Label

from countdown import DEFAULT_SECONDS, TICK_INTERVAL, CountdownController, Display, tick_while_running

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# --- Configuration ---
# COUNTDOWN_SECONDS, COUNTDOWN_STEP and COUNTDOWN_LOG_LEVEL may be set in the
# environment; command line options win over them.
DEFAULT_STEP = 5
DEFAULT_LOG_LEVEL = "WARNING"

PLAY_GLYPH = "▶"
PAUSE_GLYPH = "⏸"


@dataclass(frozen=True)
class Settings:
    seconds: int = DEFAULT_SECONDS
    step: int = DEFAULT_STEP
    log_level: str = DEFAULT_LOG_LEVEL


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        print(f"Warning: {name}={raw!r} is not a whole number, using {default}.")
        return default
    if value < 0:
        print(f"Warning: {name} must not be negative, using {default}.")
        return default
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables, falling back to defaults."""
    if environ is None:
        environ = os.environ

    log_level = environ.get("COUNTDOWN_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        print(f"Warning: unknown COUNTDOWN_LOG_LEVEL {log_level!r}, using {DEFAULT_LOG_LEVEL}.")
        log_level = DEFAULT_LOG_LEVEL

    return Settings(
        seconds=_read_int(environ, "COUNTDOWN_SECONDS", DEFAULT_SECONDS),
        step=_read_int(environ, "COUNTDOWN_STEP", DEFAULT_STEP),
        log_level=log_level,
    )


class CountdownApp(App):
    """A Textual app for a single countdown with +/- adjustment."""

    TITLE = "Countdown"

    CSS = """
    Screen {
        align: center middle;
    }

    .time-row {
        width: auto;
        height: auto;
        align: center bottom;
    }

    Digits {
        width: auto;
        color: $accent;
    }

    .unit {
        padding: 0 0 0 1;
        text-style: bold;
    }

    #controls {
        width: auto;
        height: auto;
        margin-top: 1;
    }

    #controls Button {
        margin: 0 2;
    }
    """

    BINDINGS = [
        Binding("space", "toggle", "Start/Pause"),
        Binding("plus,equals_sign", "increase", "+5s"),
        Binding("minus", "decrease", "-5s"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        initial_seconds: int = DEFAULT_SECONDS,
        step_seconds: int = DEFAULT_STEP,
        tick_interval: float = TICK_INTERVAL,
    ):
        super().__init__()
        self.countdown = CountdownController(initial_seconds)
        self.step_seconds = step_seconds
        self.tick_interval = tick_interval
        self._was_running = False
        self._last_remaining = 0
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        """Create child widgets for the app."""
        display = self.countdown.render()
        yield Header()
        with Vertical(classes="time-row"):
            with Horizontal(classes="time-row"):
                yield Digits(str(display.minutes), id="minutes")
                yield Label("MIN", classes="unit")
            with Horizontal(classes="time-row"):
                yield Digits(str(display.seconds), id="seconds")
                yield Label("SEC", classes="unit")
        with Horizontal(id="controls"):
            yield Button(f"-{self.step_seconds}s", id="decrease")
            yield Button(PLAY_GLYPH, id="toggle", variant="primary")
            yield Button(f"+{self.step_seconds}s", id="increase")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#decrease", Button).tooltip = f"Remove {self.step_seconds} seconds"
        self.query_one("#increase", Button).tooltip = f"Add {self.step_seconds} seconds"
        self._unsubscribe = self.countdown.subscribe(self.show_countdown)
        self.show_countdown(self.countdown.render())

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def on_button_pressed(self, event: Button.Pressed) -> None:
        actions = {
            "decrease": self.action_decrease,
            "toggle": self.action_toggle,
            "increase": self.action_increase,
        }
        action = actions.get(event.button.id)
        if action:
            action()

    def action_increase(self) -> None:
        self.countdown.increment(self.step_seconds)

    def action_decrease(self) -> None:
        self.countdown.decrement(self.step_seconds)

    def action_toggle(self) -> None:
        """Start or pause the countdown."""
        self.countdown.toggle_run_state()
        if self.countdown.is_running:
            # a worker rather than set_interval: the loop re-checks the run state
            # and exclusive cancels any loop left over from an earlier start
            self.run_worker(
                tick_while_running(self.countdown, self.tick_interval),
                name="ticker",
                group="ticker",
                exclusive=True,
            )
        else:
            self.workers.cancel_group(self, "ticker")

    def show_countdown(self, display: Display) -> None:
        """Push a Display from the controller onto the widgets."""
        self.query_one("#minutes", Digits).update(str(display.minutes))
        self.query_one("#seconds", Digits).update(str(display.seconds))

        toggle = self.query_one("#toggle", Button)
        if display.is_running:
            toggle.label = PAUSE_GLYPH
            toggle.variant = "success"
            toggle.tooltip = "Pause countdown"
        else:
            toggle.label = PLAY_GLYPH
            toggle.variant = "primary"
            toggle.tooltip = "Launch countdown"

        remaining = display.minutes * 60 + display.seconds
        # only a tick down from a non-zero duration counts as finishing
        finished = self._was_running and not display.is_running and remaining == 0 and self._last_remaining > 0
        self._was_running = display.is_running
        self._last_remaining = remaining
        if finished:
            logger.info("Countdown finished")
            self.bell()
            self.notify("Countdown finished")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="tcountdown",
        description="Terminal countdown timer with +/- adjustment",
        epilog="Keys: space start/pause, +/- adjust, q quit.",
    )
    parser.add_argument("--seconds", type=int, default=None, help="initial duration in seconds")
    parser.add_argument("--step", type=int, default=None, help="seconds added or removed per press")
    parser.add_argument("--version", action="version", version=f"tcountdown {__version__}")
    args = parser.parse_args(argv)
    for name in ("seconds", "step"):
        value = getattr(args, name)
        if value is not None and value < 0:
            parser.error(f"--{name} must not be negative")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, handlers=[TextualHandler()])

    app = CountdownApp(
        initial_seconds=settings.seconds if args.seconds is None else args.seconds,
        step_seconds=settings.step if args.step is None else args.step,
    )
    app.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
