"""Task definitions and the registry that maps task names to them."""

import argparse
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional


class ParamType:
    def __init__(self, name: str, parse: Callable[[str], Any]):
        self.name = name
        self.parse = parse

    def __call__(self, value):
        try:
            return self.parse(value)
        except (TypeError, ValueError):
            raise argparse.ArgumentTypeError(f"invalid {self.name} value: {value!r}")

    def __repr__(self):
        return f"ParamType({self.name})"


types = SimpleNamespace(
    string=ParamType('string', str),
    int=ParamType('int', int),
)


@dataclass
class TaskParam:
    name: str
    description: str
    type: ParamType = types.string
    optional: bool = False
    default: Any = None


@dataclass
class TaskDefinition:
    name: str
    description: str
    params: List[TaskParam] = field(default_factory=list)
    action: Optional[Callable[[Dict[str, Any], Any], Any]] = None

    def add_param(self, name: str, description: str, type: ParamType = types.string) -> "TaskDefinition":
        self.params.append(TaskParam(name, description, type))
        return self

    def add_optional_param(self, name: str, description: str, default: Any = None,
                           type: ParamType = types.string) -> "TaskDefinition":
        self.params.append(TaskParam(name, description, type, optional=True, default=default))
        return self

    def set_action(self, action: Callable[[Dict[str, Any], Any], Any]) -> "TaskDefinition":
        self.action = action
        return self

    def resolve_args(self, task_args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Fills in defaults and checks that required parameters are present."""
        task_args = dict(task_args or {})
        resolved = {}
        for param in self.params:
            value = task_args.get(param.name)
            if value is None:
                if not param.optional:
                    raise ValueError(f"Missing required parameter '{param.name}' for task '{self.name}'")
                value = param.default
            resolved[param.name] = value
        return resolved


class TaskRegistry:
    """Registry for all available tasks."""

    def __init__(self):
        self._tasks: Dict[str, TaskDefinition] = {}

    def task(self, name: str, description: str = "") -> TaskDefinition:
        """Registers (or replaces) a task and returns its definition for configuration."""
        definition = TaskDefinition(name, description)
        self._tasks[name] = definition
        return definition

    def get(self, name: str) -> Optional[TaskDefinition]:
        return self._tasks.get(name)

    def list_tasks(self) -> List[str]:
        return sorted(self._tasks.keys())

    def run_task(self, name: str, task_args: Optional[Dict[str, Any]], env):
        definition = self._tasks.get(name)
        if definition is None:
            raise KeyError(f"Unknown task: {name}")
        if definition.action is None:
            raise ValueError(f"Task '{name}' has no action")
        return definition.action(definition.resolve_args(task_args), env)

    def build_parser(self, prog: Optional[str] = None) -> argparse.ArgumentParser:
        """Builds an argparse parser with one sub-command per task."""
        parser = argparse.ArgumentParser(prog=prog, description="Graph Subscriptions deployment tasks")
        parser.add_argument("--rpc-url", dest="rpc_url", help="RPC endpoint (overrides RPC_URL)")
        sub = parser.add_subparsers(dest="task", metavar="TASK")

        for name in self.list_tasks():
            definition = self._tasks[name]
            task_parser = sub.add_parser(name, help=definition.description, description=definition.description)
            for param in definition.params:
                help_text = param.description
                if param.optional and param.default is not None:
                    help_text = f"{help_text} (default: {param.default})"
                task_parser.add_argument(
                    f"--{param.name}",
                    dest=param.name,
                    type=param.type,
                    required=not param.optional,
                    default=param.default,
                    help=help_text,
                )
        return parser


registry = TaskRegistry()
task = registry.task
