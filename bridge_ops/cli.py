from typing import Any, Dict

import click

from bridge_ops.errors import TaskError
from bridge_ops.tasks import ChainTask, ExecutionContext, TaskOutcome


def run_task(task: ChainTask, parameters: Dict[str, Any], context: ExecutionContext) -> TaskOutcome:
    """Runs a task, turning a task failure into a diagnostic and a distinct exit code."""
    try:
        return task.run(parameters, context)
    except TaskError as e:
        click.secho(f"x {type(e).__name__}: {e}", fg="red", err=True)
        raise SystemExit(e.exit_code)
