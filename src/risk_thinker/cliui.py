"""
Terminal UI components for Risk Thinker
"""

import sys
import time
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Colors:
    """ANSI color codes for terminal output"""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"

    BRIGHT_RED = "\033[91m"
    BRIGHT_YELLOW = "\033[93m"


class ProgressBar:
    """Simple progress bar for CLI"""

    def __init__(
        self, total: int, width: int = 40, fill_char: str = "█", empty_char: str = "░"
    ):
        self.total = total
        self.current = 0
        self.width = width
        self.fill_char = fill_char
        self.empty_char = empty_char
        self.start_time = time.time()

    def update(self, amount: int = 1):
        """Update progress by amount"""
        self.current = min(self.current + amount, self.total)
        self._draw()

    def _draw(self):
        """Draw the progress bar"""
        if self.total == 0:
            percent = 100.0
            filled_width = self.width
        else:
            percent = (self.current / self.total) * 100
            filled_width = int(self.width * self.current // self.total)
        empty_width = self.width - filled_width

        bar = self.fill_char * filled_width + self.empty_char * empty_width

        elapsed = time.time() - self.start_time

        sys.stdout.write(
            f"\r{Colors.CYAN}[{bar}]{Colors.RESET} {percent:6.1f}% ({self.current}/{self.total}) {elapsed:.1f}s"
        )
        sys.stdout.flush()

    def finish(self):
        """Complete the progress bar"""
        self.current = self.total
        self._draw()
        print()  # New line


class ModernCLI:
    """Terminal interface for Risk Thinker"""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.current_step = 0
        self.total_steps = 0

    def set_total_steps(self, total: int):
        """Set total number of steps for progress tracking"""
        self.total_steps = total
        self.current_step = 0

    def step(self, title: str):
        """Move to next step"""
        self.current_step += 1
        self._print_step_header(title)

    def _print_step_header(self, title: str):
        if self.total_steps > 0:
            progress = f"({self.current_step}/{self.total_steps})"
        else:
            progress = f"({self.current_step})"

        print(f"\n{Colors.BOLD}{Colors.BLUE}▶ Step {progress}: {title}{Colors.RESET}")

    def log(self, level: LogLevel, message: str, details: Optional[str] = None):
        """Log a message with appropriate styling"""
        icon, color = self._get_log_style(level)

        if level == LogLevel.DEBUG and not self.verbose:
            return

        print(f"{color}{icon} {message}{Colors.RESET}")

        if details and (self.verbose or level in [LogLevel.ERROR, LogLevel.WARNING]):
            for line in details.split("\n"):
                if line.strip():
                    print(f"  {Colors.DIM}{line}{Colors.RESET}")

    def _get_log_style(self, level: LogLevel) -> tuple[str, str]:
        styles = {
            LogLevel.DEBUG: ("🔍", Colors.DIM),
            LogLevel.INFO: ("ℹ️", Colors.BLUE),
            LogLevel.SUCCESS: ("✅", Colors.GREEN),
            LogLevel.WARNING: ("⚠️", Colors.YELLOW),
            LogLevel.ERROR: ("❌", Colors.RED),
        }
        return styles.get(level, ("•", Colors.RESET))

    def success(self, message: str, details: Optional[str] = None):
        self.log(LogLevel.SUCCESS, message, details)

    def info(self, message: str, details: Optional[str] = None):
        self.log(LogLevel.INFO, message, details)

    def warning(self, message: str, details: Optional[str] = None):
        self.log(LogLevel.WARNING, message, details)

    def error(self, message: str, details: Optional[str] = None):
        self.log(LogLevel.ERROR, message, details)

    def debug(self, message: str, details: Optional[str] = None):
        self.log(LogLevel.DEBUG, message, details)

    def show_banner(self):
        """Show application banner"""
        banner = f"""
{Colors.BOLD}{Colors.CYAN}
╔═══════════════════════════════════════════════════════════════════════════════╗
║                                 Risk Thinker                                  ║
╚═══════════════════════════════════════════════════════════════════════════════╝
{Colors.RESET}
"""
        print(banner)

    def show_summary(self, risks_count: int, categories_count: int, processing_time: float):
        """Show final summary"""
        print(f"\n{Colors.BOLD}{Colors.GREEN}🎯 Analysis Complete!{Colors.RESET}")
        print(
            f"  {Colors.CYAN}•{Colors.RESET} Identified {Colors.BOLD}{risks_count}{Colors.RESET} risks "
            f"in {Colors.BOLD}{categories_count}{Colors.RESET} categories"
        )
        print(
            f"  {Colors.CYAN}•{Colors.RESET} Processing time: {Colors.BOLD}{processing_time:.1f}s{Colors.RESET}"
        )

    def show_statistics(self, stats: Dict[str, Dict[str, int]]):
        """Show still-open risk counts per severity"""
        self.info("Risks by severity:")
        for severity, by_status in reversed(list(stats.items())):
            total = sum(by_status.values())
            if not total:
                continue
            color = self._get_severity_color(severity)
            print(
                f"  {Colors.CYAN}•{Colors.RESET} {color}{severity}{Colors.RESET}: "
                f"{Colors.BOLD}{total}{Colors.RESET}"
            )

    def create_progress_bar(self, total: int) -> ProgressBar:
        return ProgressBar(total)

    def show_risks_preview(self, risks: List[Any], max_show: int = 3):
        """Show a preview of the first few risks"""
        if not risks:
            self.warning("No risks identified")
            return

        self.info(
            f"Preview of identified risks (showing {min(len(risks), max_show)} of {len(risks)}):"
        )

        for i, risk in enumerate(risks[:max_show]):
            severity = str(risk.severity)
            severity_color = self._get_severity_color(severity)
            print(
                f"  {Colors.BOLD}{i + 1}.{Colors.RESET} {severity_color}{severity}{Colors.RESET} - {risk.synthetic_id}"
            )

        if len(risks) > max_show:
            remaining = len(risks) - max_show
            print(f"  {Colors.DIM}... and {remaining} more risks{Colors.RESET}")

    def _get_severity_color(self, severity: str) -> str:
        severity_lower = severity.lower()
        if severity_lower == "critical":
            return Colors.BRIGHT_RED
        elif severity_lower == "high":
            return Colors.RED
        elif severity_lower == "elevated":
            return Colors.BRIGHT_YELLOW
        elif severity_lower == "medium":
            return Colors.YELLOW
        elif severity_lower == "low":
            return Colors.GREEN
        else:
            return Colors.RESET


# Global CLI instance
ui = ModernCLI()


def set_verbose(verbose: bool):
    """Set verbose mode globally"""
    global ui
    ui.verbose = verbose
