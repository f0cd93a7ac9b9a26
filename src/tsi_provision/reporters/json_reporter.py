"""JSON Reporter Implementation."""

import json

from tsi_provision.model.result import RunResult
from tsi_provision.playbook import Playbook
from tsi_provision.reporters.base import BaseReporter


class JsonReporter(BaseReporter):
    """Generates machine-readable JSON output."""

    def report_run(self, result: RunResult) -> int:
        self.console.print_json(json.dumps(result.to_dict()))
        return result.exit_code

    def report_plan(self, playbook: Playbook) -> None:
        data = {
            "name": playbook.name,
            "actions": [
                {"name": a.name, "resource": a.resource.kind, "notify": a.notify}
                for a in playbook.actions
            ],
            "handlers": [
                {"name": h.name, "resource": h.resource.kind, "notify": h.notify}
                for h in playbook.handlers.values()
            ],
        }
        self.console.print_json(json.dumps(data))
