import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from xano_mcp.gateways.xano_client import XanoClient
from xano_mcp.mcp.models import HttpMethod, ToolCallResult, ToolInput
from xano_mcp.mcp.registry import RegisteredTool, define_tool
from xano_mcp.tools.base import NoInput, XanoToolkit
from xano_mcp.tools.formatting import field_line, items_of, render_sections, time_line, yes_no

logger = logging.getLogger(__name__)


class TaskIdInput(ToolInput):
    task_id: str = Field(description="ID of the task")


class CreateTaskInput(ToolInput):
    name: str = Field(description="Name of the task")
    description: str = Field(description="Description of the task")
    datasource: str = Field(description="Datasource for the task")
    active: bool = Field(description="Whether the task is active")
    docs: Optional[str] = Field(default=None, description="Documentation for the task")
    branch: Optional[str] = Field(default=None, description="Branch name for the task")


class UpdateTaskInput(TaskIdInput):
    name: str = Field(description="Updated name of the task")
    description: str = Field(description="Updated description of the task")
    datasource: str = Field(description="Updated datasource for the task")
    active: bool = Field(description="Whether the task is active")
    docs: Optional[str] = Field(default=None, description="Updated documentation for the task")


def _task_body(task: Dict[str, Any]) -> str:
    return (
        f"**ID**: {task.get('id')}\n"
        + field_line("Description", task.get("description"), "No description")
        + field_line("Datasource", task.get("datasource"))
        + f"**Active**: {yes_no(task.get('active'))}\n"
        + time_line("Created", task.get("created_at"))
        + time_line("Updated", task.get("updated_at"))
        + field_line("Branch", task.get("branch"))
        + field_line("Documentation", task.get("docs"))
    )


def _task_details(title: str, task: Dict[str, Any]) -> str:
    return f"# {title}\n\n**Name**: {task.get('name')}\n" + _task_body(task)


class TaskTools(XanoToolkit):
    """定时任务工具"""

    async def list_tasks(self, args: NoInput) -> ToolCallResult:
        logger.info("[Tool] Executing list-tasks")
        tasks = items_of(await self.client.request(self.client.workspace_path("task")))
        logger.info(f"[Tool] Listed {len(tasks)} tasks")
        sections = [f"## {t.get('name')}\n" + _task_body(t) for t in tasks]
        return ToolCallResult.text(render_sections("Workspace Tasks", sections))

    async def get_task_details(self, args: TaskIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing get-task-details for task ID: {args.task_id}")
        task = await self.client.request(self.client.workspace_path("task", args.task_id)) or {}
        return ToolCallResult.text(_task_details(f"Task: {task.get('name')}", task))

    async def create_task(self, args: CreateTaskInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing create-task for name: {args.name}")
        task = await self.client.request(
            self.client.workspace_path("task"), HttpMethod.POST, args.to_body()
        ) or {}
        logger.info(f"[Tool] Created task with ID: {task.get('id')}")
        return ToolCallResult.text(_task_details("Task Created", task))

    async def update_task(self, args: UpdateTaskInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing update-task for task ID: {args.task_id}")
        return await self.update_then_fetch(
            self.client.workspace_path("task", args.task_id),
            args.to_body("name", "description", "datasource", "active", "docs"),
            "task",
            args.task_id,
            lambda task: _task_details("Task Updated", task),
        )

    async def delete_task(self, args: TaskIdInput) -> ToolCallResult:
        logger.info(f"[Tool] Executing delete-task for task ID: {args.task_id}")
        return await self.fetch_then_delete(
            self.client.workspace_path("task", args.task_id), "task", args.task_id
        )

    def get_tools(self) -> List[RegisteredTool]:
        return [
            define_tool("list-tasks", "List all tasks in the workspace", NoInput, self.list_tasks),
            define_tool("get-task-details", "Get details for a specific task",
                        TaskIdInput, self.get_task_details),
            define_tool("create-task", "Create a new scheduled task in the workspace",
                        CreateTaskInput, self.create_task),
            define_tool("update-task", "Update an existing task", UpdateTaskInput, self.update_task),
            define_tool("delete-task", "Delete a task from the workspace", TaskIdInput, self.delete_task),
        ]


def get_tools(client: XanoClient) -> List[RegisteredTool]:
    return TaskTools(client).get_tools()
