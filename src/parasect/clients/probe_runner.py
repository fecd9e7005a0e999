"""Runs the predicate command for a single candidate index."""

import logging
import subprocess
from typing import Optional

from parasect.constants import OUTPUT_TAIL_LINES
from parasect.models.command import CommandTemplate
from parasect.models.search import ExitStatus, Outcome, ProbeOutcome

logger = logging.getLogger(__name__)


def _tail(text: str, max_lines: int = OUTPUT_TAIL_LINES) -> str:
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    return "\n".join(lines[-max_lines:])


class ProbeRunner:
    """Spawn the command for an index, wait for it, and classify the exit.

    Exit code 0 is a pass and any other code is a fail. A process that cannot
    be started, or that is killed by a signal, is a spawn error.
    """

    def __init__(
        self,
        template: CommandTemplate,
        cwd: Optional[str] = None,
        capture_output: bool = True,
    ):
        self.template = template
        self.cwd = cwd
        self.capture_output = capture_output

    def run(self, index: int) -> ProbeOutcome:
        cmd = self.template.command_for(index)
        logger.debug(f"Spawning probe x={index}: {cmd}")

        try:
            proc = subprocess.run(
                cmd,
                cwd=self.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE if self.capture_output else None,
                stderr=subprocess.STDOUT if self.capture_output else None,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.info(f"Failed to spawn probe x={index}: {e}")
            return ProbeOutcome(
                outcome=Outcome.SPAWN_ERROR,
                detail=f"Subprocess failed to spawn: {' '.join(cmd)}: {e}",
            )

        tail = _tail(proc.stdout or "")

        if proc.returncode < 0:
            status = ExitStatus.signaled(-proc.returncode)
            logger.info(f"Probe x={index} was {status.describe()}")
            return ProbeOutcome(
                outcome=Outcome.SPAWN_ERROR,
                detail=f"{' '.join(cmd)} was {status.describe()}",
                exit_status=status,
                output_tail=tail,
            )

        status = ExitStatus.exited(proc.returncode)
        outcome = Outcome.PASS if proc.returncode == 0 else Outcome.FAIL
        logger.debug(f"Probe x={index} finished with {status.describe()} ({outcome.label})")
        return ProbeOutcome(outcome=outcome, exit_status=status, output_tail=tail)
