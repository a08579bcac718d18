"""
Background scheduling for agent tasks.

``schedule_loop`` polls forever, running ``run_agent_cycle`` once per interval.
Run it standalone with ``python -m agent_sns.worker`` or inside the API
process with ``AGENT_SNS_RUN_SCHEDULER=true``.
"""

from .scheduler import CycleReport, run_agent_cycle, schedule_loop

__all__ = ["CycleReport", "run_agent_cycle", "schedule_loop"]
