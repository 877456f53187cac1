from html import escape

from .models import Priority
from .presentation import AIState, LoadState, TaskBoard, TaskView

PRIORITY_COLORS = {
    Priority.LOW: "#059669",
    Priority.MEDIUM: "#d97706",
    Priority.HIGH: "#e11d48",
}

PAGE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>TaskFlow</title>
<style>
body {{ font-family: system-ui, sans-serif; max-width: 40rem; margin: 3rem auto; color: #0f172a; }}
header {{ display: flex; justify-content: space-between; align-items: baseline; }}
ul {{ list-style: none; padding: 0; }}
li {{ padding: .75rem 0; border-bottom: 1px solid #f1f5f9; }}
.done {{ text-decoration: line-through; color: #94a3b8; }}
.badge {{ font-size: .65rem; font-weight: bold; border: 1px solid; border-radius: 1rem; padding: 0 .4rem; }}
.time {{ font-size: .7rem; color: #94a3b8; }}
.panel {{ background: #faf5ff; border: 1px solid #e9d5ff; border-radius: 1rem; padding: .75rem; margin: .5rem 0 0 2rem; }}
form.inline {{ display: inline; }}
</style>
</head>
<body>
<header>
<h1>TaskFlow</h1>
<div><strong>{completed}/{total}</strong> completed</div>
</header>
<form method="post" action="/ui/tasks">
<input type="text" name="title" placeholder="Type a task and hit enter..." required autocomplete="off">
<select name="priority">
<option value="LOW" selected>Low</option>
<option value="MEDIUM">Med</option>
<option value="HIGH">High</option>
</select>
<button type="submit">Add</button>
</form>
{body}
</body>
</html>
"""


def _button(action: str, label: str, title: str = "", disabled: bool = False) -> str:
    return (
        f'<form class="inline" method="post" action="{escape(action)}">'
        f'<button type="submit" title="{escape(title)}"{" disabled" if disabled else ""}>'
        f"{escape(label)}</button></form>"
    )


def render_suggestion(board: TaskBoard) -> str:
    suggestion = board.suggestion
    steps = "".join(f"<li>{escape(step)}</li>" for step in suggestion.subtasks)
    return (
        '<div class="panel">'
        "<small>AI REFINEMENT</small> "
        + _button("/ui/suggestion/dismiss", "x", "Dismiss")
        + f"<p><strong>{escape(suggestion.refined_title)}</strong></p>"
        f"<ul>{steps}</ul>"
        "</div>"
    )


def render_task(board: TaskBoard, task: TaskView) -> str:
    pending = board.ai_state is AIState.PENDING and board.ai_task_id == task.id
    color = PRIORITY_COLORS[task.priority]
    row = (
        "<li>"
        + _button(
            f"/ui/tasks/{task.id}/toggle",
            "[x]" if task.completed else "[ ]",
            "Mark as incomplete" if task.completed else "Mark as complete",
        )
        + f' <span class="{"done" if task.completed else ""}">{escape(task.title)}</span>'
        f' <span class="badge" style="color: {color}">{task.priority.value}</span>'
        f' <span class="time">{task.created_at.strftime("%H:%M")}</span> '
        + _button(f"/ui/tasks/{task.id}/suggest", "..." if pending else "AI", "Get AI Suggestions", pending)
        + _button(f"/ui/tasks/{task.id}/delete", "Delete", "Delete Task")
    )
    if board.ai_state is AIState.RESOLVED and board.ai_task_id == task.id and board.suggestion:
        row += render_suggestion(board)
    return row + "</li>"


def render_board(board: TaskBoard) -> str:
    """Render the whole page for the current board state"""
    if board.load_state is LoadState.LOADING:
        body = "<p>Fetching your agenda...</p>"
    elif not board.tasks:
        body = "<h3>Clear skies ahead</h3><p>You've completed everything for now.</p>"
    else:
        body = "<ul>" + "".join(render_task(board, task) for task in board.tasks) + "</ul>"
    return PAGE.format(
        completed=board.completed_count,
        total=board.total_count,
        body=body,
    )
